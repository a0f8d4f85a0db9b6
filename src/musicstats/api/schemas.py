"""Request and response schemas for the statistics API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from musicstats.domain.entities import Artist, CompleteStats, Track


class LinkPlatformRequest(BaseModel):
    """Body of POST /api/statistics/create."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int | str = Field(alias="userId", description="Numeric user id")
    music_platform: str = Field(description="Streaming platform, e.g. 'spotify'")


class PlatformLinkResponse(BaseModel):
    """A user's linked platform."""

    user_id: int = Field(description="User id")
    music_platform: str = Field(description="Linked streaming platform")


class FetchStatsResponse(BaseModel):
    """Result of the OAuth callback: what was stored."""

    message: str
    top_artists_saved: int = Field(description="Number of artists stored")
    top_tracks_saved: int = Field(description="Number of tracks stored")
    favorite_genre: str | None = Field(default=None, description="Inferred favorite genre")


class FavoriteGenreResponse(BaseModel):
    favorite_genre: str


class ArtistResponse(BaseModel):
    """One top artist."""

    artist_name: str
    ranking: int = Field(ge=1, le=3)

    @classmethod
    def from_entity(cls, artist: Artist) -> "ArtistResponse":
        return cls(artist_name=artist.name, ranking=artist.rank)


class TrackResponse(BaseModel):
    """One top track."""

    track_name: str
    artist_name: str
    ranking: int = Field(ge=1, le=3)

    @classmethod
    def from_entity(cls, track: Track) -> "TrackResponse":
        return cls(track_name=track.name, artist_name=track.artist_name, ranking=track.rank)


class TopArtistsResponse(BaseModel):
    top_artists: list[ArtistResponse]


class TopTracksResponse(BaseModel):
    top_tracks: list[TrackResponse]


class CompleteStatsResponse(BaseModel):
    """Full statistics aggregate of a user."""

    user_id: int
    music_platform: str
    favorite_genre: str | None
    top_artists: list[ArtistResponse]
    top_tracks: list[TrackResponse]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, stats: CompleteStats) -> "CompleteStatsResponse":
        return cls(
            user_id=stats.user_id,
            music_platform=stats.platform.value,
            favorite_genre=stats.favorite_genre,
            top_artists=[ArtistResponse.from_entity(a) for a in stats.top_artists],
            top_tracks=[TrackResponse.from_entity(t) for t in stats.top_tracks],
            created_at=stats.created_at,
            updated_at=stats.updated_at,
        )


class DeleteStatsResponse(BaseModel):
    """Rows removed by DELETE /api/statistics/user-stats."""

    message: str
    stats_deleted: int
    artists_deleted: int
    tracks_deleted: int


class HealthResponse(BaseModel):
    status: str
    app_name: str
