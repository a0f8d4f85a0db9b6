"""
Platform strategy interface.

Every streaming platform plugs in behind IPlatformStrategy and returns the same
PlatformStats shape, so use cases never branch on the platform name. New
platforms only need a strategy class and a registry entry.

Lifecycle:
    strategy = SpotifyStrategy(code, client)   # Uninitialized
    await strategy.init()                       # Ready (or StrategyInitError)
    stats = await strategy.get_stats()
"""

from abc import ABC, abstractmethod

from musicstats.domain.entities import MusicPlatform
from musicstats.domain.value_objects import PlatformStats


class IPlatformStrategy(ABC):
    """Normalizes one platform's data into PlatformStats."""

    @property
    @abstractmethod
    def platform(self) -> MusicPlatform:
        """Platform this strategy talks to."""
        pass

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        """True once init() has obtained an access token."""
        pass

    @abstractmethod
    async def init(self) -> None:
        """Exchange the authorization code; raises StrategyInitError on failure."""
        pass

    @abstractmethod
    async def get_stats(self) -> PlatformStats:
        """Fetch and normalize statistics; raises InvalidStateException before init()."""
        pass

    async def close(self) -> None:
        """Release resources held by the strategy (HTTP clients etc.)."""
        return None
