"""Tests for the user event consumer."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from musicstats.domain.entities import MusicPlatform
from musicstats.infrastructure.messaging import UserEventConsumer, extract_user_platform


def _event(user_id: object = 42, *accounts: str) -> dict:
    return {
        "user": {"user_id": user_id, "username": "someone"},
        "social_media": [{"social_media_name": name} for name in accounts],
    }


class TestExtractUserPlatform:
    """Tests for extract_user_platform()."""

    def test_first_supported_platform_wins(self) -> None:
        payload = _event(42, "Instagram", "Spotify", "Deezer")

        assert extract_user_platform(payload) == (42, MusicPlatform.SPOTIFY)

    def test_respects_allow_list(self) -> None:
        payload = _event(42, "Deezer", "Spotify")

        assert extract_user_platform(payload, ["deezer", "spotify"]) == (
            42,
            MusicPlatform.DEEZER,
        )

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            {"social_media": [{"social_media_name": "Spotify"}]},
            _event("not-a-number", "Spotify"),
            _event(42),
            _event(42, "Instagram"),
            {"user": {"user_id": 1}, "social_media": ["Spotify"]},
        ],
    )
    def test_returns_none_when_nothing_usable(self, payload: object) -> None:
        assert extract_user_platform(payload) is None


class TestUserEventConsumer:
    """Tests for UserEventConsumer."""

    @pytest.fixture
    def user_service(self) -> MagicMock:
        service = MagicMock()
        service.link_platform = AsyncMock()
        return service

    @pytest.fixture
    def kafka_consumer(self) -> MagicMock:
        consumer = MagicMock()
        consumer.poll.return_value = None
        return consumer

    async def test_handle_message_links_platform(self, kafka_consumer, user_service) -> None:
        consumer = UserEventConsumer(kafka_consumer, user_service, "user")

        handled = await consumer.handle_message(json.dumps(_event(7, "Spotify")).encode())

        assert handled is True
        user_service.link_platform.assert_awaited_once_with(7, "spotify")

    @pytest.mark.parametrize("raw", [None, b"\xff\xfe", "not json", json.dumps(_event(7))])
    async def test_handle_message_skips_unusable(self, kafka_consumer, user_service, raw) -> None:
        consumer = UserEventConsumer(kafka_consumer, user_service, "user")

        assert await consumer.handle_message(raw) is False
        user_service.link_platform.assert_not_called()

    async def test_start_and_stop(self, kafka_consumer, user_service) -> None:
        consumer = UserEventConsumer(kafka_consumer, user_service, "user", poll_timeout=0.01)

        await consumer.start()
        assert consumer.is_running
        kafka_consumer.subscribe.assert_called_once_with(["user"])

        await consumer.stop()
        assert not consumer.is_running
        kafka_consumer.close.assert_called_once()

    async def test_loop_survives_bad_message(self, kafka_consumer, user_service) -> None:
        message = MagicMock()
        message.error.return_value = None
        message.value.return_value = json.dumps(_event(7, "Spotify")).encode()
        user_service.link_platform.side_effect = RuntimeError("db down")

        consumer = UserEventConsumer(kafka_consumer, user_service, "user", poll_timeout=0.01)

        def poll(timeout: float) -> MagicMock | None:
            if kafka_consumer.poll.call_count >= 3:
                consumer._running = False
            return message

        kafka_consumer.poll.side_effect = poll

        consumer._running = True
        await consumer._run()

        assert user_service.link_platform.await_count == 3
