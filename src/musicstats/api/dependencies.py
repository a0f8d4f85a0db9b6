"""Dependency injection for API endpoints."""

import logging
from typing import cast

from fastapi import Depends, HTTPException, Request

from musicstats.application.services import MusicStatsService, SpotifyAuthService, UserService
from musicstats.application.strategies import StrategyFactory
from musicstats.application.use_cases import CleanupUserDataUseCase, FetchUserMusicStatsUseCase
from musicstats.config import Settings, get_settings
from musicstats.domain.ports import (
    IArtistRepository,
    IEventPublisher,
    IPlatformClient,
    ITrackRepository,
    IUserPlatformRepository,
    IUserStatisticsRepository,
)
from musicstats.infrastructure.persistence import (
    ArtistRepository,
    Database,
    TrackRepository,
    UserPlatformRepository,
    UserStatisticsRepository,
)

logger = logging.getLogger(__name__)


# Hey future me, everything with a lifecycle lives on app.state (see lifecycle.lifespan). If an
# attribute is missing, startup didn't finish - answer 503 instead of crashing with AttributeError.
def _require_state(request: Request, name: str) -> object:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(status_code=503, detail=f"{name} not initialized")
    return value


def get_app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return cast(Settings, settings) if settings is not None else get_settings()


def get_database(request: Request) -> Database:
    return cast(Database, _require_state(request, "db"))


def get_event_publisher(request: Request) -> IEventPublisher:
    return cast(IEventPublisher, _require_state(request, "event_publisher"))


def get_strategy_factory(request: Request) -> StrategyFactory:
    return cast(StrategyFactory, _require_state(request, "strategy_factory"))


def get_spotify_auth_client(request: Request) -> IPlatformClient:
    return cast(IPlatformClient, _require_state(request, "spotify_auth_client"))


def get_artist_repository(db: Database = Depends(get_database)) -> IArtistRepository:
    return ArtistRepository(db.session_scope)


def get_track_repository(db: Database = Depends(get_database)) -> ITrackRepository:
    return TrackRepository(db.session_scope)


def get_statistics_repository(
    db: Database = Depends(get_database),
) -> IUserStatisticsRepository:
    return UserStatisticsRepository(db.session_scope)


def get_user_platform_repository(
    db: Database = Depends(get_database),
) -> IUserPlatformRepository:
    return UserPlatformRepository(db.session_scope)


def get_music_stats_service(
    artists: IArtistRepository = Depends(get_artist_repository),
    tracks: ITrackRepository = Depends(get_track_repository),
    statistics: IUserStatisticsRepository = Depends(get_statistics_repository),
) -> MusicStatsService:
    return MusicStatsService(artists, tracks, statistics)


def get_user_service(
    links: IUserPlatformRepository = Depends(get_user_platform_repository),
    settings: Settings = Depends(get_app_settings),
) -> UserService:
    return UserService(links, settings.api.allowed_platforms)


def get_spotify_auth_service(
    client: IPlatformClient = Depends(get_spotify_auth_client),
    settings: Settings = Depends(get_app_settings),
) -> SpotifyAuthService:
    return SpotifyAuthService(client, settings.api.allowed_platforms)


def get_fetch_stats_use_case(
    artists: IArtistRepository = Depends(get_artist_repository),
    tracks: ITrackRepository = Depends(get_track_repository),
    statistics: IUserStatisticsRepository = Depends(get_statistics_repository),
    publisher: IEventPublisher = Depends(get_event_publisher),
) -> FetchUserMusicStatsUseCase:
    return FetchUserMusicStatsUseCase(artists, tracks, statistics, publisher)


def get_cleanup_use_case(
    artists: IArtistRepository = Depends(get_artist_repository),
    tracks: ITrackRepository = Depends(get_track_repository),
    statistics: IUserStatisticsRepository = Depends(get_statistics_repository),
    publisher: IEventPublisher = Depends(get_event_publisher),
) -> CleanupUserDataUseCase:
    return CleanupUserDataUseCase(artists, tracks, statistics, publisher)
