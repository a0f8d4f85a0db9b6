"""Domain events published to other services after a successful mutation."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from musicstats.domain.entities import Artist, Track


class StatsEventType(str, Enum):
    """Event names on the statistics topic."""

    STATS_UPDATED = "USER_STATS_UPDATED"
    STATS_DELETED = "USER_STATS_DELETED"


@dataclass(frozen=True)
class StatsEvent(ABC):
    """Base class for statistics events."""

    user_id: int

    @property
    @abstractmethod
    def event_type(self) -> StatsEventType:
        """Name of the event on the topic."""

    @property
    def key(self) -> str:
        """Message key; events for one user land on one partition."""
        return str(self.user_id)

    def to_message(self) -> dict[str, Any]:
        return {"event": self.event_type.value, "userId": self.user_id}


@dataclass(frozen=True)
class StatsUpdatedEvent(StatsEvent):
    """A fetch-and-persist cycle stored new statistics for a user."""

    favorite_genre: str | None = None
    top_artists: list[Artist] = field(default_factory=list)
    top_tracks: list[Track] = field(default_factory=list)

    @property
    def event_type(self) -> StatsEventType:
        return StatsEventType.STATS_UPDATED

    def to_message(self) -> dict[str, Any]:
        message = super().to_message()
        message.update(
            {
                "favorite_genre": self.favorite_genre,
                "top_artists": [
                    {"artist_name": artist.name, "ranking": artist.rank}
                    for artist in self.top_artists
                ],
                # Consumers of the statistic topic read tracks as "top_musics"/"music_name"
                "top_musics": [
                    {
                        "music_name": track.name,
                        "artist_name": track.artist_name,
                        "ranking": track.rank,
                    }
                    for track in self.top_tracks
                ],
            }
        )
        return message


@dataclass(frozen=True)
class StatsDeletedEvent(StatsEvent):
    """All statistics for a user were deleted."""

    @property
    def event_type(self) -> StatsEventType:
        return StatsEventType.STATS_DELETED
