"""Use case: delete everything stored for a user."""

import asyncio
import logging
from dataclasses import dataclass

from musicstats.application.events import publish_safely
from musicstats.application.use_cases import UseCase
from musicstats.domain.events import StatsDeletedEvent
from musicstats.domain.ports import (
    IArtistRepository,
    IEventPublisher,
    ITrackRepository,
    IUserStatisticsRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class CleanupUserDataRequest:
    """Request to delete all statistics data of a user."""

    user_id: int


@dataclass(frozen=True)
class CleanupResult:
    """Number of rows removed from each store."""

    stats_deleted: int
    artists_deleted: int
    tracks_deleted: int


# Hey future me - the statistics record is the ONLY existence check. No stats row means we
# return None without touching the artist/track stores, even if orphaned ranked rows exist
# from a half-finished fetch. The next successful fetch reconciles those anyway.
class CleanupUserDataUseCase(UseCase[CleanupUserDataRequest, CleanupResult | None]):
    """Cascading delete of a user's statistics, artists and tracks."""

    def __init__(
        self,
        artist_repository: IArtistRepository,
        track_repository: ITrackRepository,
        statistics_repository: IUserStatisticsRepository,
        event_publisher: IEventPublisher | None = None,
    ) -> None:
        self._artists = artist_repository
        self._tracks = track_repository
        self._statistics = statistics_repository
        self._publisher = event_publisher

    async def execute(self, request: CleanupUserDataRequest) -> CleanupResult | None:
        user_id = request.user_id

        existing = await self._statistics.find_by_user(user_id)
        if existing is None:
            logger.info("No statistics to delete for user %s", user_id)
            return None

        # Each delete is a single delete-by-filter; if one fails the others are not rolled back
        stats_deleted, artists_deleted, tracks_deleted = await asyncio.gather(
            self._statistics.delete_by_user(user_id),
            self._artists.delete_all_by_user(user_id),
            self._tracks.delete_all_by_user(user_id),
        )
        result = CleanupResult(
            stats_deleted=stats_deleted,
            artists_deleted=artists_deleted,
            tracks_deleted=tracks_deleted,
        )
        logger.info(
            "Deleted statistics for user %s",
            user_id,
            extra={
                "user_id": user_id,
                "stats_deleted": stats_deleted,
                "artists_deleted": artists_deleted,
                "tracks_deleted": tracks_deleted,
            },
        )

        await publish_safely(self._publisher, StatsDeletedEvent(user_id=user_id))
        return result
