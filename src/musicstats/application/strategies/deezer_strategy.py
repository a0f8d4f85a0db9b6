"""Deezer placeholder strategy."""

from musicstats.domain.entities import MusicPlatform
from musicstats.domain.exceptions import UnsupportedPlatformError
from musicstats.domain.ports import IPlatformStrategy
from musicstats.domain.value_objects import PlatformStats


class DeezerStrategy(IPlatformStrategy):
    """Registered so "deezer" is a known platform; construction always fails.

    Failing in the constructor means there is never a half-built Deezer
    strategy around to call init() or get_stats() on.
    """

    def __init__(self, code: str) -> None:
        raise UnsupportedPlatformError(
            MusicPlatform.DEEZER.value, "Deezer strategy not yet implemented"
        )

    @property
    def platform(self) -> MusicPlatform:
        return MusicPlatform.DEEZER

    @property
    def is_ready(self) -> bool:
        return False

    async def init(self) -> None:
        raise UnsupportedPlatformError(MusicPlatform.DEEZER.value)

    async def get_stats(self) -> PlatformStats:
        raise UnsupportedPlatformError(MusicPlatform.DEEZER.value)
