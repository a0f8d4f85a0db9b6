"""Spotify implementation of the platform strategy."""

import asyncio
import logging
from typing import Any

from musicstats.domain.entities import TOP_N, MusicPlatform
from musicstats.domain.exceptions import InvalidStateException, StrategyInitError
from musicstats.domain.genres import most_frequent_genre
from musicstats.domain.ports import IPlatformClient, IPlatformStrategy
from musicstats.domain.value_objects import PlatformStats, RankedArtistStat, RankedTrackStat

logger = logging.getLogger(__name__)


def _first_artist_name(track: dict[str, Any]) -> str:
    artists = track.get("artists") or []
    return str(artists[0].get("name", "")) if artists else ""


class SpotifyStrategy(IPlatformStrategy):
    """Fetches a user's Spotify top lists and turns them into PlatformStats."""

    # 30 artists give a decent genre sample; only the first TOP_N are stored
    GENRE_SAMPLE_SIZE = 30

    def __init__(self, code: str, client: IPlatformClient) -> None:
        self._code = code
        self._client = client
        self._access_token: str | None = None

    @property
    def platform(self) -> MusicPlatform:
        return MusicPlatform.SPOTIFY

    @property
    def is_ready(self) -> bool:
        return self._access_token is not None

    # Hey future me - init() is all-or-nothing. The token is only assigned after the exchange
    # succeeded, so a failed init leaves the strategy Uninitialized and get_stats() keeps
    # refusing. Calling init() again on a Ready strategy does nothing (codes are single-use).
    async def init(self) -> None:
        if self.is_ready:
            return
        try:
            tokens = await self._client.exchange_code_for_token(self._code)
        except Exception as e:
            logger.warning(
                "Spotify strategy init failed: %s",
                e,
                extra={"platform": self.platform.value, "error_type": type(e).__name__},
            )
            raise StrategyInitError(
                self.platform.value, f"Spotify token exchange failed: {e}"
            ) from e
        self._access_token = tokens.access_token

    async def get_stats(self) -> PlatformStats:
        if not self.is_ready:
            raise InvalidStateException("strategy not initialized")

        artists, tracks = await asyncio.gather(
            self._client.fetch_top_artists(self.GENRE_SAMPLE_SIZE),
            self._client.fetch_top_tracks(TOP_N),
        )

        favorite_genre = most_frequent_genre(
            genre for artist in artists for genre in artist.get("genres") or []
        )
        top_artists = [
            RankedArtistStat(name=artist["name"], rank=rank)
            for rank, artist in enumerate(artists[:TOP_N], start=1)
        ]
        top_tracks = [
            RankedTrackStat(
                name=track["name"], artist_name=_first_artist_name(track), rank=rank
            )
            for rank, track in enumerate(tracks[:TOP_N], start=1)
        ]
        return PlatformStats(
            favorite_genre=favorite_genre, top_artists=top_artists, top_tracks=top_tracks
        )

    async def close(self) -> None:
        await self._client.close()
