"""Tests for publish_safely()."""

from unittest.mock import AsyncMock

from musicstats.application.events import publish_safely
from musicstats.domain.events import StatsDeletedEvent


class TestPublishSafely:
    """Tests for the best-effort publish guard."""

    async def test_returns_true_on_success(self) -> None:
        publisher = AsyncMock()
        event = StatsDeletedEvent(user_id=1)

        assert await publish_safely(publisher, event) is True
        publisher.publish.assert_awaited_once_with(event)

    async def test_none_publisher_is_noop(self) -> None:
        assert await publish_safely(None, StatsDeletedEvent(user_id=1)) is False

    async def test_failure_is_logged_not_raised(self) -> None:
        publisher = AsyncMock()
        publisher.publish.side_effect = ConnectionError("broker down")

        assert await publish_safely(publisher, StatsDeletedEvent(user_id=1)) is False
