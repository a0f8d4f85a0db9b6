"""Tests for MusicStatsService."""

from unittest.mock import AsyncMock

import pytest

from musicstats.application.services import MusicStatsService
from musicstats.domain.entities import (
    Artist,
    MusicPlatform,
    RankedItemKind,
    Track,
    UserStatistics,
)
from musicstats.domain.exceptions import ValidationError


@pytest.fixture
def artist_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.find_by_user.return_value = [
        Artist(id="a1", user_id=1, name="First", rank=1),
        Artist(id="orphan", user_id=1, name="Leftover", rank=2),
    ]
    repo.find_by_user_and_rank.return_value = Artist(id="a1", user_id=1, name="First", rank=1)
    return repo


@pytest.fixture
def track_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.find_by_user.return_value = [
        Track(id="t1", user_id=1, name="Song", artist_name="First", rank=1)
    ]
    repo.find_by_user_and_rank.return_value = None
    return repo


@pytest.fixture
def stats_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.find_by_user.return_value = UserStatistics(
        id="s1",
        user_id=1,
        platform=MusicPlatform.SPOTIFY,
        favorite_genre="techno",
        artist_ids=["a1"],
        track_ids=["t1"],
    )
    return repo


@pytest.fixture
def service(artist_repo, track_repo, stats_repo) -> MusicStatsService:
    return MusicStatsService(artist_repo, track_repo, stats_repo)


class TestMusicStatsService:
    """Tests for the read-side queries."""

    async def test_complete_stats_only_includes_linked_items(self, service) -> None:
        stats = await service.get_complete_stats(1)

        assert stats is not None
        assert stats.favorite_genre == "techno"
        assert stats.platform is MusicPlatform.SPOTIFY
        assert [a.id for a in stats.top_artists] == ["a1"]
        assert [t.id for t in stats.top_tracks] == ["t1"]

    async def test_complete_stats_none_without_record(self, service, stats_repo, artist_repo):
        stats_repo.find_by_user.return_value = None

        assert await service.get_complete_stats(1) is None
        artist_repo.find_by_user.assert_not_called()

    async def test_favorite_genre(self, service, stats_repo) -> None:
        assert await service.get_favorite_genre(1) == "techno"

        stats_repo.find_by_user.return_value = None
        assert await service.get_favorite_genre(1) is None

    async def test_top_lists_come_from_repositories(self, service) -> None:
        assert len(await service.get_top_artists(1)) == 2
        assert len(await service.get_top_tracks(1)) == 1

    async def test_item_by_rank(self, service, artist_repo, track_repo) -> None:
        artist = await service.get_item_by_rank(1, 1)
        track = await service.get_item_by_rank(1, 2, RankedItemKind.TRACK)

        assert artist is not None and artist.name == "First"
        assert track is None
        artist_repo.find_by_user_and_rank.assert_awaited_once_with(1, 1)
        track_repo.find_by_user_and_rank.assert_awaited_once_with(1, 2)

    @pytest.mark.parametrize("rank", [0, 4])
    async def test_rank_out_of_range_raises(self, service, artist_repo, rank: int) -> None:
        with pytest.raises(ValidationError):
            await service.get_artist_by_rank(1, rank)
        artist_repo.find_by_user_and_rank.assert_not_called()
