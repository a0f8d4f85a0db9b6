"""Repository implementations using SQLAlchemy."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, func, select

from musicstats.domain.entities import (
    MAX_NAME_LENGTH,
    MIN_RANK,
    TOP_N,
    Artist,
    MusicPlatform,
    Track,
    UserPlatformLink,
    UserStatistics,
    check_rank,
    normalize_name,
)
from musicstats.domain.exceptions import ValidationError
from musicstats.domain.ports import (
    IArtistRepository,
    ITrackRepository,
    IUserPlatformRepository,
    IUserStatisticsRepository,
)
from musicstats.domain.value_objects import RankedArtistStat, RankedTrackStat
from musicstats.infrastructure.persistence.database import SessionScope
from musicstats.infrastructure.persistence.models import (
    ArtistModel,
    TrackModel,
    UserPlatformModel,
    UserStatisticsArtistModel,
    UserStatisticsModel,
    UserStatisticsTrackModel,
    ensure_utc_aware,
    utc_now,
)

logger = logging.getLogger(__name__)


# Hey future me, this base holds the shared "top-N per user" logic for artists AND tracks.
# Subclasses only say what the identity key is and how to map rows. Every public method opens
# its own session via session_scope, so upsert_many can gather the per-item upserts without
# two coroutines ever touching the same AsyncSession.
class _RankedItemRepository(ABC):
    """Shared persistence for ranked top-N items."""

    model: Any

    def __init__(self, session_scope: SessionScope) -> None:
        self._session_scope = session_scope

    @abstractmethod
    def _stat_key(self, item: Any) -> tuple[str, ...]:
        """Identity key of an incoming item (already normalized)."""

    @abstractmethod
    def _model_key(self, model: Any) -> tuple[str, ...]:
        """Identity key of a stored row."""

    @abstractmethod
    def _key_filter(self, user_id: int, item: Any) -> list[Any]:
        """WHERE clauses selecting the stored row for an incoming item."""

    @abstractmethod
    def _new_model(self, user_id: int, item: Any) -> Any:
        """Build a new ORM row from an incoming item."""

    @abstractmethod
    def _normalize(self, item: Any) -> Any:
        """Return the item with trimmed names, raising ValidationError if invalid."""

    @abstractmethod
    def _to_entity(self, model: Any) -> Any:
        """Convert ORM row to domain entity."""

    async def find_by_user(self, user_id: int) -> list[Any]:
        async with self._session_scope() as session:
            stmt = (
                select(self.model)
                .where(self.model.user_id == user_id, self.model.rank >= MIN_RANK)
                .order_by(self.model.rank.asc())
            )
            result = await session.execute(stmt)
            return [self._to_entity(model) for model in result.scalars().all()]

    async def find_by_user_and_rank(self, user_id: int, rank: int) -> Any | None:
        check_rank(rank)
        async with self._session_scope() as session:
            stmt = select(self.model).where(
                self.model.user_id == user_id, self.model.rank == rank
            )
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None

    async def upsert_many(self, user_id: int, items: Sequence[Any]) -> list[Any]:
        """Upsert a fresh top-N list for a user.

        Rows of the user whose key is not in ``items`` are deleted, rows that
        keep their key but change rank are parked on a free negative rank,
        then every item is upserted concurrently. Afterwards the stored ranks
        for the user are exactly the ranks of ``items``.

        Returns:
            Stored entities in the order of ``items``
        """
        batch = self._validate_batch(items)
        await self._reconcile(user_id, batch)
        if not batch:
            return []

        saved = await asyncio.gather(*(self._upsert_one(user_id, item) for item in batch))

        logger.debug(
            "Upserted %d %s rows for user %s",
            len(saved),
            self.model.__tablename__,
            user_id,
            extra={"user_id": user_id, "count": len(saved)},
        )
        return list(saved)

    async def delete_all_by_user(self, user_id: int) -> int:
        async with self._session_scope() as session:
            stmt = delete(self.model).where(self.model.user_id == user_id)
            result = await session.execute(stmt)
            return result.rowcount or 0  # type: ignore[attr-defined]

    def _validate_batch(self, items: Sequence[Any]) -> list[Any]:
        batch = [self._normalize(item) for item in items]
        if len(batch) > TOP_N:
            raise ValidationError(f"at most {TOP_N} items can be ranked", field="items")
        ranks = [item.rank for item in batch]
        for rank in ranks:
            check_rank(rank)
        if len(set(ranks)) != len(ranks):
            raise ValidationError("ranks must be unique within a batch", field="rank")
        keys = [self._stat_key(item) for item in batch]
        if len(set(keys)) != len(keys):
            raise ValidationError("items must be unique within a batch", field="items")
        return batch

    # Listen up, this is what keeps (user_id, rank) unique across re-fetches. Example: old top
    # list A=1, B=2, C=3; new list B=1, D=2, A=3. C is stale and gets deleted. A and B both move,
    # so they're parked on negative ranks that no row currently holds, one flush at a time.
    # After that, ranks 1..3 are free for exactly the rows that will claim them.
    async def _reconcile(self, user_id: int, batch: list[Any]) -> None:
        wanted = {self._stat_key(item): item.rank for item in batch}

        async with self._session_scope() as session:
            result = await session.execute(
                select(self.model).where(self.model.user_id == user_id)
            )
            existing = list(result.scalars().all())

            stale_ids = [m.id for m in existing if self._model_key(m) not in wanted]
            if stale_ids:
                await session.execute(delete(self.model).where(self.model.id.in_(stale_ids)))

            moving = [
                m
                for m in existing
                if self._model_key(m) in wanted and wanted[self._model_key(m)] != m.rank
            ]
            if not moving:
                return

            used = {m.rank for m in existing if m.id not in stale_ids}
            parked = -1
            for model in moving:
                while parked in used:
                    parked -= 1
                used.discard(model.rank)
                model.rank = parked
                used.add(parked)
                await session.flush()

    async def _upsert_one(self, user_id: int, item: Any) -> Any:
        async with self._session_scope() as session:
            stmt = select(self.model).where(*self._key_filter(user_id, item))
            result = await session.execute(stmt)
            model = result.scalar_one_or_none()

            if model is None:
                model = self._new_model(user_id, item)
                session.add(model)
            else:
                model.rank = item.rank
                model.updated_at = utc_now()

            await session.flush()
            return self._to_entity(model)


class ArtistRepository(_RankedItemRepository, IArtistRepository):
    """SQLAlchemy implementation of the top-artist store."""

    model = ArtistModel

    def _normalize(self, item: RankedArtistStat) -> RankedArtistStat:
        return RankedArtistStat(name=normalize_name(item.name, "name"), rank=item.rank)

    def _stat_key(self, item: RankedArtistStat) -> tuple[str, ...]:
        return (item.name,)

    def _model_key(self, model: ArtistModel) -> tuple[str, ...]:
        return (model.name,)

    def _key_filter(self, user_id: int, item: RankedArtistStat) -> list[Any]:
        return [ArtistModel.user_id == user_id, ArtistModel.name == item.name]

    def _new_model(self, user_id: int, item: RankedArtistStat) -> ArtistModel:
        return ArtistModel(user_id=user_id, name=item.name, rank=item.rank)

    def _to_entity(self, model: ArtistModel) -> Artist:
        return Artist(
            id=model.id,
            user_id=model.user_id,
            name=model.name,
            rank=model.rank,
            created_at=ensure_utc_aware(model.created_at),
            updated_at=ensure_utc_aware(model.updated_at),
        )


class TrackRepository(_RankedItemRepository, ITrackRepository):
    """SQLAlchemy implementation of the top-track store."""

    model = TrackModel

    def _normalize(self, item: RankedTrackStat) -> RankedTrackStat:
        return RankedTrackStat(
            name=normalize_name(item.name, "name"),
            artist_name=(item.artist_name or "").strip()[:MAX_NAME_LENGTH],
            rank=item.rank,
        )

    def _stat_key(self, item: RankedTrackStat) -> tuple[str, ...]:
        return (item.name, item.artist_name)

    def _model_key(self, model: TrackModel) -> tuple[str, ...]:
        return (model.name, model.artist_name)

    def _key_filter(self, user_id: int, item: RankedTrackStat) -> list[Any]:
        return [
            TrackModel.user_id == user_id,
            TrackModel.name == item.name,
            TrackModel.artist_name == item.artist_name,
        ]

    def _new_model(self, user_id: int, item: RankedTrackStat) -> TrackModel:
        return TrackModel(
            user_id=user_id, name=item.name, artist_name=item.artist_name, rank=item.rank
        )

    def _to_entity(self, model: TrackModel) -> Track:
        return Track(
            id=model.id,
            user_id=model.user_id,
            name=model.name,
            artist_name=model.artist_name,
            rank=model.rank,
            created_at=ensure_utc_aware(model.created_at),
            updated_at=ensure_utc_aware(model.updated_at),
        )


class UserStatisticsRepository(IUserStatisticsRepository):
    """SQLAlchemy implementation of the statistics aggregate store."""

    def __init__(self, session_scope: SessionScope) -> None:
        self._session_scope = session_scope

    async def find_by_user(self, user_id: int) -> UserStatistics | None:
        async with self._session_scope() as session:
            result = await session.execute(
                select(UserStatisticsModel).where(UserStatisticsModel.user_id == user_id)
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None

            artist_ids = await session.execute(
                select(UserStatisticsArtistModel.artist_id)
                .where(UserStatisticsArtistModel.statistics_id == model.id)
                .order_by(UserStatisticsArtistModel.position)
            )
            track_ids = await session.execute(
                select(UserStatisticsTrackModel.track_id)
                .where(UserStatisticsTrackModel.statistics_id == model.id)
                .order_by(UserStatisticsTrackModel.position)
            )
            return self._to_entity(
                model, list(artist_ids.scalars().all()), list(track_ids.scalars().all())
            )

    # Hey future me - "update, not replace": the row keeps its id and created_at across
    # fetches, only the fields and the link rows change. Link rows are rewritten wholesale
    # since there are at most 3 of each.
    async def update_or_create(
        self,
        user_id: int,
        *,
        favorite_genre: str | None,
        platform: MusicPlatform,
        artist_ids: Sequence[str],
        track_ids: Sequence[str],
    ) -> UserStatistics:
        if len(artist_ids) > TOP_N or len(track_ids) > TOP_N:
            raise ValidationError(
                f"user statistics can reference at most {TOP_N} items per kind"
            )

        async with self._session_scope() as session:
            result = await session.execute(
                select(UserStatisticsModel).where(UserStatisticsModel.user_id == user_id)
            )
            model = result.scalar_one_or_none()
            if model is None:
                model = UserStatisticsModel(
                    user_id=user_id,
                    favorite_genre=favorite_genre,
                    platform=platform.value,
                )
                session.add(model)
                await session.flush()
                logger.info("Created statistics for user %s", user_id)
            else:
                model.favorite_genre = favorite_genre
                model.platform = platform.value
                model.updated_at = utc_now()

            await session.execute(
                delete(UserStatisticsArtistModel).where(
                    UserStatisticsArtistModel.statistics_id == model.id
                )
            )
            await session.execute(
                delete(UserStatisticsTrackModel).where(
                    UserStatisticsTrackModel.statistics_id == model.id
                )
            )
            session.add_all(
                UserStatisticsArtistModel(
                    statistics_id=model.id, artist_id=artist_id, position=position
                )
                for position, artist_id in enumerate(artist_ids)
            )
            session.add_all(
                UserStatisticsTrackModel(
                    statistics_id=model.id, track_id=track_id, position=position
                )
                for position, track_id in enumerate(track_ids)
            )
            await session.flush()
            return self._to_entity(model, list(artist_ids), list(track_ids))

    async def delete_by_user(self, user_id: int) -> int:
        async with self._session_scope() as session:
            stmt = delete(UserStatisticsModel).where(UserStatisticsModel.user_id == user_id)
            result = await session.execute(stmt)
            return result.rowcount or 0  # type: ignore[attr-defined]

    @staticmethod
    def _to_entity(
        model: UserStatisticsModel, artist_ids: list[str], track_ids: list[str]
    ) -> UserStatistics:
        return UserStatistics(
            id=model.id,
            user_id=model.user_id,
            platform=MusicPlatform(model.platform),
            favorite_genre=model.favorite_genre,
            artist_ids=artist_ids,
            track_ids=track_ids,
            created_at=ensure_utc_aware(model.created_at),
            updated_at=ensure_utc_aware(model.updated_at),
        )


class UserPlatformRepository(IUserPlatformRepository):
    """SQLAlchemy implementation of the user to platform link store."""

    def __init__(self, session_scope: SessionScope) -> None:
        self._session_scope = session_scope

    async def find_by_user(self, user_id: int) -> UserPlatformLink | None:
        async with self._session_scope() as session:
            model = await session.get(UserPlatformModel, user_id)
            return self._to_entity(model) if model else None

    async def upsert(self, user_id: int, platform: MusicPlatform) -> UserPlatformLink:
        async with self._session_scope() as session:
            model = await session.get(UserPlatformModel, user_id)
            if model is None:
                model = UserPlatformModel(user_id=user_id, platform=platform.value)
                session.add(model)
            else:
                model.platform = platform.value
                model.updated_at = utc_now()
            await session.flush()
            return self._to_entity(model)

    async def exists(self, user_id: int) -> bool:
        async with self._session_scope() as session:
            stmt = select(func.count()).where(UserPlatformModel.user_id == user_id)
            result = await session.execute(stmt)
            return (result.scalar() or 0) > 0

    async def delete_by_user(self, user_id: int) -> int:
        async with self._session_scope() as session:
            stmt = delete(UserPlatformModel).where(UserPlatformModel.user_id == user_id)
            result = await session.execute(stmt)
            return result.rowcount or 0  # type: ignore[attr-defined]

    @staticmethod
    def _to_entity(model: UserPlatformModel) -> UserPlatformLink:
        return UserPlatformLink(
            user_id=model.user_id,
            platform=MusicPlatform(model.platform),
            created_at=ensure_utc_aware(model.created_at),
            updated_at=ensure_utc_aware(model.updated_at),
        )
