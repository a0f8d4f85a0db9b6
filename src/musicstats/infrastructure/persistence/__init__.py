"""Persistence layer: database bootstrap, ORM models and repositories."""

from musicstats.infrastructure.persistence.database import Database, SessionScope
from musicstats.infrastructure.persistence.repositories import (
    ArtistRepository,
    TrackRepository,
    UserPlatformRepository,
    UserStatisticsRepository,
)

__all__ = [
    "ArtistRepository",
    "Database",
    "SessionScope",
    "TrackRepository",
    "UserPlatformRepository",
    "UserStatisticsRepository",
]
