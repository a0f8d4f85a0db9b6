"""User to platform link management."""

import logging
from collections.abc import Iterable

from musicstats.domain.entities import MusicPlatform, UserPlatformLink
from musicstats.domain.ports import IUserPlatformRepository
from musicstats.domain.validation import DEFAULT_ALLOWED_PLATFORMS, parse_platform

logger = logging.getLogger(__name__)


class UserService:
    """Keeps track of which streaming platform each user linked."""

    def __init__(
        self,
        user_platform_repository: IUserPlatformRepository,
        allowed_platforms: Iterable[str] = DEFAULT_ALLOWED_PLATFORMS,
    ) -> None:
        self._links = user_platform_repository
        self._allowed = tuple(allowed_platforms)

    async def find_by_user_id(self, user_id: int) -> UserPlatformLink | None:
        return await self._links.find_by_user(user_id)

    async def find_platform_by_user_id(self, user_id: int) -> MusicPlatform | None:
        link = await self._links.find_by_user(user_id)
        return link.platform if link else None

    async def exists(self, user_id: int) -> bool:
        return await self._links.exists(user_id)

    async def link_platform(self, user_id: int, platform: str) -> UserPlatformLink:
        """Create or update the user's platform link.

        Raises:
            ValidationError: platform not in the allow-list
        """
        music_platform = parse_platform(platform, self._allowed)
        link = await self._links.upsert(user_id, music_platform)
        logger.info(
            "Linked user %s to %s",
            user_id,
            music_platform.value,
            extra={"user_id": user_id, "platform": music_platform.value},
        )
        return link

    async def delete_by_user_id(self, user_id: int) -> int:
        return await self._links.delete_by_user(user_id)
