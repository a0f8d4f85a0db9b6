"""Value objects passed between the platform layer and the use cases."""

from dataclasses import dataclass, field

from musicstats.domain.entities import MusicPlatform


@dataclass(frozen=True)
class RankedArtistStat:
    """An artist as normalized by a platform strategy, before persistence."""

    name: str
    rank: int


@dataclass(frozen=True)
class RankedTrackStat:
    """A track as normalized by a platform strategy, before persistence."""

    name: str
    artist_name: str
    rank: int


@dataclass(frozen=True)
class PlatformStats:
    """Canonical statistics shape every strategy returns."""

    favorite_genre: str | None
    top_artists: list[RankedArtistStat] = field(default_factory=list)
    top_tracks: list[RankedTrackStat] = field(default_factory=list)


@dataclass(frozen=True)
class TokenPair:
    """OAuth tokens returned by an authorization-code exchange."""

    access_token: str
    refresh_token: str | None = None


@dataclass(frozen=True)
class OAuthState:
    """Payload carried through the OAuth redirect in the `state` parameter."""

    user_id: int
    platform: MusicPlatform


__all__ = [
    "OAuthState",
    "PlatformStats",
    "RankedArtistStat",
    "RankedTrackStat",
    "TokenPair",
]
