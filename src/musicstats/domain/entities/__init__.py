"""Domain entities."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from musicstats.domain.exceptions import ValidationError

# Top lists are always top-3; rank is 1-based.
TOP_N = 3
MIN_RANK = 1
MAX_RANK = TOP_N
MAX_NAME_LENGTH = 255


class MusicPlatform(str, Enum):
    """Streaming platforms known to the service."""

    SPOTIFY = "spotify"
    DEEZER = "deezer"


class RankedItemKind(str, Enum):
    """Which top list a ranked item belongs to."""

    ARTIST = "artist"
    TRACK = "track"


def normalize_name(value: str, field_name: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValidationError(f"{field_name} cannot be empty", field=field_name)
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"{field_name} cannot exceed {MAX_NAME_LENGTH} characters", field=field_name
        )
    return cleaned


def check_rank(rank: int) -> None:
    if not MIN_RANK <= rank <= MAX_RANK:
        raise ValidationError(f"rank must be between {MIN_RANK} and {MAX_RANK}", field="rank")


@dataclass
class Artist:
    """One of a user's top artists."""

    id: str
    user_id: int
    name: str
    rank: int
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        self.name = normalize_name(self.name, "name")
        check_rank(self.rank)


@dataclass
class Track:
    """One of a user's top tracks."""

    id: str
    user_id: int
    name: str
    artist_name: str
    rank: int
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        self.name = normalize_name(self.name, "name")
        # Spotify occasionally returns tracks without artists; empty is allowed here
        self.artist_name = self.artist_name.strip()[:MAX_NAME_LENGTH]
        check_rank(self.rank)


@dataclass
class UserPlatformLink:
    """Which streaming platform a user has linked."""

    user_id: int
    platform: MusicPlatform
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))


# Hey future me - UserStatistics REFERENCES ranked items by id, it doesn't contain them.
# Deleting the stats row leaves the artist/track rows alone; the cleanup use case deletes
# all three stores explicitly. The <=3 check mirrors the top-3 invariant per kind.
@dataclass
class UserStatistics:
    """Per-user roll-up: favorite genre, platform and links to the top items."""

    id: str
    user_id: int
    platform: MusicPlatform
    favorite_genre: str | None = None
    artist_ids: list[str] = field(default_factory=list)
    track_ids: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if len(self.artist_ids) > TOP_N:
            raise ValidationError(
                f"user statistics can reference at most {TOP_N} artists", field="artist_ids"
            )
        if len(self.track_ids) > TOP_N:
            raise ValidationError(
                f"user statistics can reference at most {TOP_N} tracks", field="track_ids"
            )


@dataclass
class CompleteStats:
    """User statistics merged with the linked top artists and tracks."""

    user_id: int
    platform: MusicPlatform
    favorite_genre: str | None
    top_artists: list[Artist]
    top_tracks: list[Track]
    created_at: datetime
    updated_at: datetime

    @property
    def is_empty(self) -> bool:
        """True when there is nothing worth showing for this user."""
        return self.favorite_genre is None and not self.top_artists and not self.top_tracks


__all__ = [
    "MAX_NAME_LENGTH",
    "MAX_RANK",
    "MIN_RANK",
    "TOP_N",
    "check_rank",
    "normalize_name",
    "Artist",
    "CompleteStats",
    "MusicPlatform",
    "RankedItemKind",
    "Track",
    "UserPlatformLink",
    "UserStatistics",
]
