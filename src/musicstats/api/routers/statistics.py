"""Statistics API endpoints.

Hey future me - this router is the whole public surface of the service:
- GET ""                : OAuth redirect (no code) or OAuth callback (code + state)
- POST /create          : link a user to a streaming platform
- GET  /favorite-genre, /platform, /top-artists, /top-tracks, /ranking/*, /user-stats
- DELETE /user-stats    : cascade delete of everything we store for a user

Routers stay thin: parse + validate the query, call a service/use case, map to
a schema. Absence becomes EntityNotFoundException (404) HERE, because the
services return None for "nothing stored".
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from musicstats.api.dependencies import (
    get_cleanup_use_case,
    get_fetch_stats_use_case,
    get_music_stats_service,
    get_spotify_auth_service,
    get_strategy_factory,
    get_user_service,
)
from musicstats.api.schemas import (
    ArtistResponse,
    CompleteStatsResponse,
    DeleteStatsResponse,
    FavoriteGenreResponse,
    FetchStatsResponse,
    LinkPlatformRequest,
    PlatformLinkResponse,
    TopArtistsResponse,
    TopTracksResponse,
    TrackResponse,
)
from musicstats.application.services import MusicStatsService, SpotifyAuthService, UserService
from musicstats.application.strategies import StrategyFactory
from musicstats.application.use_cases import (
    CleanupUserDataRequest,
    CleanupUserDataUseCase,
    FetchUserMusicStatsRequest,
    FetchUserMusicStatsUseCase,
)
from musicstats.domain.exceptions import EntityNotFoundException, ValidationError
from musicstats.domain.validation import parse_rank, parse_user_id

logger = logging.getLogger(__name__)

router = APIRouter()

USER_ID_QUERY = Query(default=None, alias="userId", description="Numeric user id")
RANKING_QUERY = Query(default=None, description="Rank between 1 and 3")


# Yo, ONE endpoint for both halves of the OAuth dance, because Spotify redirects back to the
# same URL we registered. Without `code` we're at the start: look up the user's platform link
# and bounce them to Spotify. With `code` we're the callback: decode state to learn who this
# is, resolve the strategy (which exchanges the code) and run the use case.
@router.get("", response_model=None)
async def fetch_statistics(
    code: str | None = Query(default=None, description="OAuth authorization code"),
    state: str | None = Query(default=None, description="OAuth state from the redirect"),
    error: str | None = Query(default=None, description="OAuth error from the platform"),
    user_id: str | None = USER_ID_QUERY,
    user_service: UserService = Depends(get_user_service),
    auth_service: SpotifyAuthService = Depends(get_spotify_auth_service),
    factory: StrategyFactory = Depends(get_strategy_factory),
    use_case: FetchUserMusicStatsUseCase = Depends(get_fetch_stats_use_case),
) -> Response:
    """Start the OAuth flow, or finish it and store the user's statistics."""
    if error:
        raise ValidationError(f"authorization was not granted: {error}", field="error")

    if not code:
        parsed_user_id = parse_user_id(user_id)
        link = await user_service.find_by_user_id(parsed_user_id)
        if link is None:
            raise EntityNotFoundException("Platform link for user", parsed_user_id)
        url = auth_service.build_authorization_url(parsed_user_id, link.platform)
        logger.info(
            "Redirecting user %s to %s consent",
            parsed_user_id,
            link.platform.value,
            extra={"user_id": parsed_user_id, "platform": link.platform.value},
        )
        return RedirectResponse(url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    if not state:
        raise ValidationError("state is required", field="state")

    oauth_state = auth_service.decode_state(state)
    strategy = await factory.resolve(oauth_state.platform.value, code)
    try:
        result = await use_case.execute(
            FetchUserMusicStatsRequest(strategy=strategy, user_id=oauth_state.user_id)
        )
    finally:
        await strategy.close()

    body = FetchStatsResponse(
        message="Statistics saved",
        top_artists_saved=len(result.saved_artists),
        top_tracks_saved=len(result.saved_tracks),
        favorite_genre=result.favorite_genre,
    )
    return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump())


@router.post(
    "/create",
    response_model=PlatformLinkResponse,
    status_code=status.HTTP_201_CREATED,
)
async def link_platform(
    body: LinkPlatformRequest,
    user_service: UserService = Depends(get_user_service),
) -> PlatformLinkResponse:
    """Create or update the user's streaming platform link."""
    link = await user_service.link_platform(parse_user_id(body.user_id), body.music_platform)
    return PlatformLinkResponse(user_id=link.user_id, music_platform=link.platform.value)


@router.get("/favorite-genre", response_model=FavoriteGenreResponse)
async def get_favorite_genre(
    user_id: str | None = USER_ID_QUERY,
    service: MusicStatsService = Depends(get_music_stats_service),
) -> FavoriteGenreResponse:
    parsed_user_id = parse_user_id(user_id)
    genre = await service.get_favorite_genre(parsed_user_id)
    if genre is None:
        raise EntityNotFoundException("Favorite genre for user", parsed_user_id)
    return FavoriteGenreResponse(favorite_genre=genre)


@router.get("/platform", response_model=PlatformLinkResponse)
async def get_platform(
    user_id: str | None = USER_ID_QUERY,
    user_service: UserService = Depends(get_user_service),
) -> PlatformLinkResponse:
    parsed_user_id = parse_user_id(user_id)
    platform = await user_service.find_platform_by_user_id(parsed_user_id)
    if platform is None:
        raise EntityNotFoundException("Platform link for user", parsed_user_id)
    return PlatformLinkResponse(user_id=parsed_user_id, music_platform=platform.value)


@router.get("/top-artists", response_model=TopArtistsResponse)
async def get_top_artists(
    user_id: str | None = USER_ID_QUERY,
    service: MusicStatsService = Depends(get_music_stats_service),
) -> TopArtistsResponse:
    parsed_user_id = parse_user_id(user_id)
    artists = await service.get_top_artists(parsed_user_id)
    if not artists:
        raise EntityNotFoundException("Top artists for user", parsed_user_id)
    return TopArtistsResponse(top_artists=[ArtistResponse.from_entity(a) for a in artists])


@router.get("/top-tracks", response_model=TopTracksResponse)
async def get_top_tracks(
    user_id: str | None = USER_ID_QUERY,
    service: MusicStatsService = Depends(get_music_stats_service),
) -> TopTracksResponse:
    parsed_user_id = parse_user_id(user_id)
    tracks = await service.get_top_tracks(parsed_user_id)
    if not tracks:
        raise EntityNotFoundException("Top tracks for user", parsed_user_id)
    return TopTracksResponse(top_tracks=[TrackResponse.from_entity(t) for t in tracks])


@router.get("/ranking/artist", response_model=ArtistResponse)
async def get_artist_by_ranking(
    user_id: str | None = USER_ID_QUERY,
    ranking: str | None = RANKING_QUERY,
    service: MusicStatsService = Depends(get_music_stats_service),
) -> ArtistResponse:
    parsed_user_id = parse_user_id(user_id)
    rank = parse_rank(ranking)
    artist = await service.get_artist_by_rank(parsed_user_id, rank)
    if artist is None:
        raise EntityNotFoundException(f"Artist at rank {rank} for user", parsed_user_id)
    return ArtistResponse.from_entity(artist)


@router.get("/ranking/track", response_model=TrackResponse)
async def get_track_by_ranking(
    user_id: str | None = USER_ID_QUERY,
    ranking: str | None = RANKING_QUERY,
    service: MusicStatsService = Depends(get_music_stats_service),
) -> TrackResponse:
    parsed_user_id = parse_user_id(user_id)
    rank = parse_rank(ranking)
    track = await service.get_track_by_rank(parsed_user_id, rank)
    if track is None:
        raise EntityNotFoundException(f"Track at rank {rank} for user", parsed_user_id)
    return TrackResponse.from_entity(track)


@router.get("/user-stats", response_model=CompleteStatsResponse)
async def get_user_stats(
    user_id: str | None = USER_ID_QUERY,
    service: MusicStatsService = Depends(get_music_stats_service),
) -> CompleteStatsResponse:
    parsed_user_id = parse_user_id(user_id)
    stats = await service.get_complete_stats(parsed_user_id)
    if stats is None or stats.is_empty:
        raise EntityNotFoundException("Statistics for user", parsed_user_id)
    return CompleteStatsResponse.from_domain(stats)


@router.delete("/user-stats", response_model=DeleteStatsResponse)
async def delete_user_stats(
    user_id: str | None = USER_ID_QUERY,
    use_case: CleanupUserDataUseCase = Depends(get_cleanup_use_case),
) -> DeleteStatsResponse:
    """Delete statistics, top artists and top tracks of a user."""
    parsed_user_id = parse_user_id(user_id)
    result = await use_case.execute(CleanupUserDataRequest(user_id=parsed_user_id))
    if result is None:
        raise EntityNotFoundException("Statistics for user", parsed_user_id)
    return DeleteStatsResponse(
        message="User statistics deleted",
        stats_deleted=result.stats_deleted,
        artists_deleted=result.artists_deleted,
        tracks_deleted=result.tracks_deleted,
    )
