"""Read-side statistics queries used by the API."""

import asyncio
import logging

from musicstats.domain.entities import (
    Artist,
    CompleteStats,
    RankedItemKind,
    Track,
)
from musicstats.domain.ports import (
    IArtistRepository,
    ITrackRepository,
    IUserStatisticsRepository,
)
from musicstats.domain.validation import parse_rank

logger = logging.getLogger(__name__)


class MusicStatsService:
    """Read-only facade over the three statistics stores.

    Absence is a normal outcome here: every method returns None or an empty
    list when nothing is stored, never an exception. Only a rank outside
    1..3 raises (ValidationError).
    """

    def __init__(
        self,
        artist_repository: IArtistRepository,
        track_repository: ITrackRepository,
        statistics_repository: IUserStatisticsRepository,
    ) -> None:
        self._artists = artist_repository
        self._tracks = track_repository
        self._statistics = statistics_repository

    async def get_complete_stats(self, user_id: int) -> CompleteStats | None:
        """Statistics record plus its linked top artists and tracks, sorted by rank."""
        stats = await self._statistics.find_by_user(user_id)
        if stats is None:
            return None

        artists, tracks = await asyncio.gather(
            self._artists.find_by_user(user_id),
            self._tracks.find_by_user(user_id),
        )
        linked_artists = set(stats.artist_ids)
        linked_tracks = set(stats.track_ids)
        return CompleteStats(
            user_id=stats.user_id,
            platform=stats.platform,
            favorite_genre=stats.favorite_genre,
            top_artists=[a for a in artists if a.id in linked_artists],
            top_tracks=[t for t in tracks if t.id in linked_tracks],
            created_at=stats.created_at,
            updated_at=stats.updated_at,
        )

    async def get_favorite_genre(self, user_id: int) -> str | None:
        stats = await self._statistics.find_by_user(user_id)
        return stats.favorite_genre if stats else None

    async def get_top_artists(self, user_id: int) -> list[Artist]:
        return await self._artists.find_by_user(user_id)

    async def get_top_tracks(self, user_id: int) -> list[Track]:
        return await self._tracks.find_by_user(user_id)

    async def get_artist_by_rank(self, user_id: int, rank: int) -> Artist | None:
        return await self._artists.find_by_user_and_rank(user_id, parse_rank(rank))

    async def get_track_by_rank(self, user_id: int, rank: int) -> Track | None:
        return await self._tracks.find_by_user_and_rank(user_id, parse_rank(rank))

    async def get_item_by_rank(
        self, user_id: int, rank: int, kind: RankedItemKind = RankedItemKind.ARTIST
    ) -> Artist | Track | None:
        """Single ranked item of either kind.

        Raises:
            ValidationError: rank outside 1..3
        """
        if kind is RankedItemKind.TRACK:
            return await self.get_track_by_rank(user_id, rank)
        return await self.get_artist_by_rank(user_id, rank)
