"""
Strategy registry and factory.

The registry maps a platform to a builder; the factory is the single place
where a platform name turns into a ready-to-use strategy.

Usage:
    registry = StrategyRegistry()
    registry.register(MusicPlatform.SPOTIFY, lambda code: SpotifyStrategy(code, client))

    factory = StrategyFactory(registry)
    strategy = await factory.resolve("spotify", code)   # already init()'ed
    stats = await strategy.get_stats()

New platforms are added by registering a builder, the factory body never changes.
"""

import logging
from collections.abc import Callable

from musicstats.domain.entities import MusicPlatform
from musicstats.domain.exceptions import UnknownPlatformError
from musicstats.domain.ports import IPlatformClient, IPlatformStrategy

from .deezer_strategy import DeezerStrategy
from .spotify_strategy import SpotifyStrategy

logger = logging.getLogger(__name__)

StrategyBuilder = Callable[[str], IPlatformStrategy]


class StrategyRegistry:
    """Platform to strategy-builder mapping. One builder per platform."""

    def __init__(self) -> None:
        self._builders: dict[MusicPlatform, StrategyBuilder] = {}

    def register(self, platform: MusicPlatform, builder: StrategyBuilder) -> None:
        """Register a builder, replacing any existing one for the platform."""
        self._builders[platform] = builder

    def unregister(self, platform: MusicPlatform) -> None:
        self._builders.pop(platform, None)

    def get(self, platform: MusicPlatform) -> StrategyBuilder | None:
        return self._builders.get(platform)

    def require(self, platform: MusicPlatform) -> StrategyBuilder:
        """
        Get a builder, raising if none is registered.

        Raises:
            UnknownPlatformError: If nothing is registered for the platform
        """
        builder = self._builders.get(platform)
        if builder is None:
            raise UnknownPlatformError(platform.value)
        return builder

    def platforms(self) -> list[MusicPlatform]:
        return list(self._builders)

    def clear(self) -> None:
        self._builders.clear()

    def __contains__(self, platform: MusicPlatform) -> bool:
        return platform in self._builders

    def __len__(self) -> int:
        return len(self._builders)


class StrategyFactory:
    """Turns a platform name and an authorization code into a Ready strategy."""

    def __init__(self, registry: StrategyRegistry) -> None:
        self._registry = registry

    async def resolve(self, platform_name: str, code: str) -> IPlatformStrategy:
        """
        Build the strategy for ``platform_name`` and run init() once.

        Unknown names fail before any builder runs, so no network call happens.

        Raises:
            UnknownPlatformError: No strategy registered under that name
            UnsupportedPlatformError: Platform known but not implemented
            StrategyInitError: Token exchange failed
        """
        normalized = (platform_name or "").strip().lower()
        try:
            platform = MusicPlatform(normalized)
        except ValueError as e:
            raise UnknownPlatformError(platform_name) from e

        builder = self._registry.require(platform)
        strategy = builder(code)
        try:
            await strategy.init()
        except Exception:
            await strategy.close()
            raise

        logger.debug("Resolved %s strategy", platform.value, extra={"platform": platform.value})
        return strategy


def build_default_registry(
    spotify_client_factory: Callable[[], IPlatformClient],
) -> StrategyRegistry:
    """Registry with every platform the service knows about.

    Args:
        spotify_client_factory: Creates a fresh client per strategy (tokens are per user)
    """
    registry = StrategyRegistry()
    registry.register(
        MusicPlatform.SPOTIFY, lambda code: SpotifyStrategy(code, spotify_client_factory())
    )
    registry.register(MusicPlatform.DEEZER, DeezerStrategy)
    return registry
