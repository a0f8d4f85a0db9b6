"""Shared fixtures for the musicstats test suite."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from musicstats.config import ApiSettings, DatabaseSettings, KafkaSettings, Settings
from musicstats.domain.entities import MusicPlatform
from musicstats.domain.exceptions import InvalidStateException, StrategyInitError
from musicstats.domain.ports import IPlatformStrategy
from musicstats.domain.value_objects import PlatformStats, RankedArtistStat, RankedTrackStat
from musicstats.infrastructure.persistence import Database


class FakeStrategy(IPlatformStrategy):
    """In-memory strategy: init() succeeds unless told otherwise, get_stats() returns fixed data."""

    def __init__(
        self, code: str, stats: PlatformStats, fail_init: bool = False
    ) -> None:
        self.code = code
        self._stats = stats
        self._fail_init = fail_init
        self._ready = False
        self.closed = False

    @property
    def platform(self) -> MusicPlatform:
        return MusicPlatform.SPOTIFY

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def init(self) -> None:
        if self._fail_init:
            raise StrategyInitError(self.platform.value, "token exchange failed")
        self._ready = True

    async def get_stats(self) -> PlatformStats:
        if not self._ready:
            raise InvalidStateException("strategy not initialized")
        return self._stats

    async def close(self) -> None:
        self.closed = True


def make_stats(
    artists: list[str],
    tracks: list[tuple[str, str]],
    favorite_genre: str | None = "pop",
) -> PlatformStats:
    """Build PlatformStats with ranks assigned in list order."""
    return PlatformStats(
        favorite_genre=favorite_genre,
        top_artists=[
            RankedArtistStat(name=name, rank=rank) for rank, name in enumerate(artists, start=1)
        ],
        top_tracks=[
            RankedTrackStat(name=name, artist_name=artist, rank=rank)
            for rank, (name, artist) in enumerate(tracks, start=1)
        ],
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway SQLite file, Kafka off, no error delay."""
    return Settings(
        environment="test",
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"),
        kafka=KafkaSettings(enabled=False),
        api=ApiSettings(error_delay_min=0, error_delay_max=0),
    )


@pytest.fixture
async def db(settings: Settings) -> AsyncGenerator[Database, None]:
    """Database with all tables created."""
    database = Database(settings)
    await database.create_tables()
    yield database
    await database.close()


@pytest.fixture
def stats_builder():
    """The make_stats helper, for tests that build platform stats inline."""
    return make_stats


@pytest.fixture
def fake_strategy_cls() -> type[FakeStrategy]:
    return FakeStrategy
