"""Use case: fetch a user's statistics from their platform and persist them.

Flow:
1. strategy.get_stats() -> favorite genre, top 3 artists, top 3 tracks
2. upsert artists, then tracks (each store keyed by name, not rank)
3. update-or-create the user's statistics record, linking the rows from step 2
4. publish a "stats updated" event (best effort)

Steps 2 and 3 are not one transaction. If step 3 fails the ranked rows stay
unlinked until the next run; re-running is safe because every write is an upsert.
"""

import logging
from dataclasses import dataclass, field

from musicstats.application.events import publish_safely
from musicstats.application.use_cases import UseCase
from musicstats.domain.entities import Artist, Track
from musicstats.domain.events import StatsUpdatedEvent
from musicstats.domain.ports import (
    IArtistRepository,
    IEventPublisher,
    IPlatformStrategy,
    ITrackRepository,
    IUserStatisticsRepository,
)

logger = logging.getLogger(__name__)


@dataclass
class FetchUserMusicStatsRequest:
    """Request carrying a Ready strategy and the user to store stats for."""

    strategy: IPlatformStrategy
    user_id: int


@dataclass
class FetchUserMusicStatsResponse:
    """Rows stored by one fetch-and-persist run."""

    saved_artists: list[Artist] = field(default_factory=list)
    saved_tracks: list[Track] = field(default_factory=list)
    favorite_genre: str | None = None


class FetchUserMusicStatsUseCase(
    UseCase[FetchUserMusicStatsRequest, FetchUserMusicStatsResponse]
):
    """Fetch statistics through a platform strategy and persist them."""

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

    # Yo, no retries and no wrapping here: AuthenticationError / ExternalServiceError from the
    # strategy go straight to the caller. Never branch on the platform either - the strategy
    # already hides that.
    async def execute(
        self, request: FetchUserMusicStatsRequest
    ) -> FetchUserMusicStatsResponse:
        strategy = request.strategy
        user_id = request.user_id

        stats = await strategy.get_stats()

        saved_artists = await self._artists.upsert_many(user_id, stats.top_artists)
        saved_tracks = await self._tracks.upsert_many(user_id, stats.top_tracks)

        await self._statistics.update_or_create(
            user_id,
            favorite_genre=stats.favorite_genre,
            platform=strategy.platform,
            artist_ids=[artist.id for artist in saved_artists],
            track_ids=[track.id for track in saved_tracks],
        )

        logger.info(
            "Stored statistics for user %s: %d artists, %d tracks",
            user_id,
            len(saved_artists),
            len(saved_tracks),
            extra={
                "user_id": user_id,
                "platform": strategy.platform.value,
                "favorite_genre": stats.favorite_genre,
            },
        )

        await publish_safely(
            self._publisher,
            StatsUpdatedEvent(
                user_id=user_id,
                favorite_genre=stats.favorite_genre,
                top_artists=saved_artists,
                top_tracks=saved_tracks,
            ),
        )

        return FetchUserMusicStatsResponse(
            saved_artists=saved_artists,
            saved_tracks=saved_tracks,
            favorite_genre=stats.favorite_genre,
        )
