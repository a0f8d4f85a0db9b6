"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from musicstats.domain.entities import (
    Artist,
    MusicPlatform,
    Track,
    UserPlatformLink,
    UserStatistics,
)
from musicstats.domain.events import StatsEvent
from musicstats.domain.ports.platform import IPlatformStrategy
from musicstats.domain.value_objects import RankedArtistStat, RankedTrackStat, TokenPair


# Hey future me, these are PORTS (hexagonal architecture). Every method is an abstractmethod,
# so a half-implemented repository blows up at instantiation with TypeError - that's a wiring
# bug and nobody should catch it. Reads return None / [] when nothing is stored; absence is
# normal here, not an exception.
class IArtistRepository(ABC):
    """Repository interface for a user's top artists."""

    @abstractmethod
    async def find_by_user(self, user_id: int) -> list[Artist]:
        """Get all top artists of a user, sorted by rank ascending."""
        pass

    @abstractmethod
    async def find_by_user_and_rank(self, user_id: int, rank: int) -> Artist | None:
        """Get the artist at a given rank."""
        pass

    @abstractmethod
    async def upsert_many(
        self, user_id: int, items: Sequence[RankedArtistStat]
    ) -> list[Artist]:
        """Insert or update artists keyed by (user, name); return the stored rows."""
        pass

    @abstractmethod
    async def delete_all_by_user(self, user_id: int) -> int:
        """Delete all artists of a user; return the number of rows deleted."""
        pass


class ITrackRepository(ABC):
    """Repository interface for a user's top tracks."""

    @abstractmethod
    async def find_by_user(self, user_id: int) -> list[Track]:
        """Get all top tracks of a user, sorted by rank ascending."""
        pass

    @abstractmethod
    async def find_by_user_and_rank(self, user_id: int, rank: int) -> Track | None:
        """Get the track at a given rank."""
        pass

    @abstractmethod
    async def upsert_many(
        self, user_id: int, items: Sequence[RankedTrackStat]
    ) -> list[Track]:
        """Insert or update tracks keyed by (user, name, artist_name); return stored rows."""
        pass

    @abstractmethod
    async def delete_all_by_user(self, user_id: int) -> int:
        """Delete all tracks of a user; return the number of rows deleted."""
        pass


class IUserStatisticsRepository(ABC):
    """Repository interface for the per-user statistics aggregate."""

    @abstractmethod
    async def find_by_user(self, user_id: int) -> UserStatistics | None:
        """Get the statistics record of a user."""
        pass

    @abstractmethod
    async def update_or_create(
        self,
        user_id: int,
        *,
        favorite_genre: str | None,
        platform: MusicPlatform,
        artist_ids: Sequence[str],
        track_ids: Sequence[str],
    ) -> UserStatistics:
        """Update the record in place, creating it on first use."""
        pass

    @abstractmethod
    async def delete_by_user(self, user_id: int) -> int:
        """Delete the record of a user; return the number of rows deleted (0 or 1)."""
        pass


class IUserPlatformRepository(ABC):
    """Repository interface for user to platform links."""

    @abstractmethod
    async def find_by_user(self, user_id: int) -> UserPlatformLink | None:
        """Get the platform link of a user."""
        pass

    @abstractmethod
    async def upsert(self, user_id: int, platform: MusicPlatform) -> UserPlatformLink:
        """Create or update the platform link of a user."""
        pass

    @abstractmethod
    async def exists(self, user_id: int) -> bool:
        """Check whether a user has linked a platform."""
        pass

    @abstractmethod
    async def delete_by_user(self, user_id: int) -> int:
        """Delete the platform link of a user."""
        pass


class IPlatformClient(ABC):
    """OAuth + top-items client for one streaming platform.

    The client holds the tokens of a single user session after a successful
    exchange, so one instance serves one strategy.
    """

    @abstractmethod
    def authorization_url(self, state: str, scopes: Sequence[str] | None = None) -> str:
        """Build the URL the user is redirected to for consent."""
        pass

    @abstractmethod
    async def exchange_code_for_token(self, code: str) -> TokenPair:
        """Exchange an authorization code; raises AuthenticationError on failure."""
        pass

    @abstractmethod
    async def refresh_access_token(self) -> str:
        """Refresh the stored access token; raises AuthenticationError on failure."""
        pass

    @abstractmethod
    async def fetch_top_artists(self, limit: int = 3) -> list[dict[str, Any]]:
        """Get the user's top artists in provider format."""
        pass

    @abstractmethod
    async def fetch_top_tracks(self, limit: int = 3) -> list[dict[str, Any]]:
        """Get the user's top tracks in provider format."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release HTTP resources."""
        pass


class IEventPublisher(ABC):
    """Fire-and-forget publisher for statistics events."""

    @abstractmethod
    async def publish(self, event: StatsEvent) -> None:
        """Publish an event. Implementations log failures instead of raising."""
        pass


__all__ = [
    "IArtistRepository",
    "IEventPublisher",
    "IPlatformClient",
    "IPlatformStrategy",
    "ITrackRepository",
    "IUserPlatformRepository",
    "IUserStatisticsRepository",
]
