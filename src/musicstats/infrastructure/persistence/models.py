"""SQLAlchemy ORM models for musicstats."""

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from sqlalchemy import ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


# SQLite drops tzinfo on the way back; attach UTC before handing datetimes to the domain.
def ensure_utc_aware(dt: datetime) -> datetime:
    """Ensure datetime is UTC-aware, assuming naive datetimes are UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Hey future me, TWO unique constraints on purpose. (user_id, name) is the upsert identity,
# (user_id, rank) is the "one artist per slot" invariant. They disagree when the top-3 gets
# reshuffled, which is why ArtistRepository.upsert_many reconciles stale rows first. There's
# NO check constraint on rank: the reconcile step briefly parks moving rows on free negative ranks.
class ArtistModel(Base):
    """A user's top artist at a given rank."""

    __tablename__ = "top_artists"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        sa.UniqueConstraint("user_id", "rank", name="uq_top_artists_user_rank"),
        sa.UniqueConstraint("user_id", "name", name="uq_top_artists_user_name"),
    )


class TrackModel(Base):
    """A user's top track at a given rank."""

    __tablename__ = "top_tracks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    artist_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        sa.UniqueConstraint("user_id", "rank", name="uq_top_tracks_user_rank"),
        sa.UniqueConstraint(
            "user_id", "name", "artist_name", name="uq_top_tracks_user_name_artist"
        ),
    )


class UserPlatformModel(Base):
    """Which streaming platform a user has linked."""

    __tablename__ = "user_platforms"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    platform: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False
    )


class UserStatisticsModel(Base):
    """Per-user statistics aggregate."""

    __tablename__ = "user_statistics"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    favorite_genre: Mapped[str | None] = mapped_column(String(255), nullable=True)
    platform: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        default=utc_now, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utc_now, onupdate=utc_now, server_default=func.now(), nullable=False
    )


# Link rows cascade from BOTH sides: deleting the stats row or a ranked item drops the link,
# never the other side.
class UserStatisticsArtistModel(Base):
    """Reference from a statistics record to one of its top artists."""

    __tablename__ = "user_statistics_artists"

    statistics_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_statistics.id", ondelete="CASCADE"), primary_key=True
    )
    artist_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("top_artists.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (Index("ix_user_statistics_artists_artist", "artist_id"),)


class UserStatisticsTrackModel(Base):
    """Reference from a statistics record to one of its top tracks."""

    __tablename__ = "user_statistics_tracks"

    statistics_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_statistics.id", ondelete="CASCADE"), primary_key=True
    )
    track_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("top_tracks.id", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (Index("ix_user_statistics_tracks_track", "track_id"),)
