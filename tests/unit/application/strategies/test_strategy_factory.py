"""Tests for the strategy registry, factory and the Deezer placeholder."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from musicstats.application.strategies import (
    DeezerStrategy,
    SpotifyStrategy,
    StrategyFactory,
    StrategyRegistry,
    build_default_registry,
)
from musicstats.domain.entities import MusicPlatform
from musicstats.domain.exceptions import (
    StrategyInitError,
    UnknownPlatformError,
    UnsupportedPlatformError,
)
from musicstats.domain.value_objects import TokenPair


class TestStrategyRegistry:
    """Tests for StrategyRegistry."""

    def test_register_and_require(self) -> None:
        registry = StrategyRegistry()
        builder = MagicMock()

        registry.register(MusicPlatform.SPOTIFY, builder)

        assert MusicPlatform.SPOTIFY in registry
        assert len(registry) == 1
        assert registry.require(MusicPlatform.SPOTIFY) is builder
        assert registry.platforms() == [MusicPlatform.SPOTIFY]

    def test_require_missing_raises(self) -> None:
        registry = StrategyRegistry()

        with pytest.raises(UnknownPlatformError):
            registry.require(MusicPlatform.DEEZER)
        assert registry.get(MusicPlatform.DEEZER) is None

    def test_unregister_and_clear(self) -> None:
        registry = StrategyRegistry()
        registry.register(MusicPlatform.SPOTIFY, MagicMock())
        registry.register(MusicPlatform.DEEZER, MagicMock())

        registry.unregister(MusicPlatform.SPOTIFY)
        assert MusicPlatform.SPOTIFY not in registry

        registry.clear()
        assert len(registry) == 0


class TestStrategyFactory:
    """Tests for StrategyFactory.resolve()."""

    async def test_resolve_builds_and_initializes(self, fake_strategy_cls, stats_builder) -> None:
        registry = StrategyRegistry()
        registry.register(
            MusicPlatform.SPOTIFY, lambda code: fake_strategy_cls(code, stats_builder([], []))
        )
        factory = StrategyFactory(registry)

        strategy = await factory.resolve("  Spotify ", "abc")

        assert strategy.is_ready
        assert strategy.code == "abc"

    async def test_unknown_name_fails_before_building(self) -> None:
        builder = MagicMock()
        registry = StrategyRegistry()
        registry.register(MusicPlatform.SPOTIFY, builder)

        with pytest.raises(UnknownPlatformError) as exc_info:
            await StrategyFactory(registry).resolve("tidal", "abc")

        assert exc_info.value.platform == "tidal"
        builder.assert_not_called()

    async def test_known_but_unregistered_platform(self) -> None:
        with pytest.raises(UnknownPlatformError):
            await StrategyFactory(StrategyRegistry()).resolve("spotify", "abc")

    async def test_init_failure_closes_strategy(self, fake_strategy_cls, stats_builder) -> None:
        built = []

        def builder(code: str):
            strategy = fake_strategy_cls(code, stats_builder([], []), fail_init=True)
            built.append(strategy)
            return strategy

        registry = StrategyRegistry()
        registry.register(MusicPlatform.SPOTIFY, builder)

        with pytest.raises(StrategyInitError):
            await StrategyFactory(registry).resolve("spotify", "abc")

        assert built[0].closed


class TestDefaultRegistry:
    """Tests for build_default_registry()."""

    def test_registers_spotify_and_deezer(self) -> None:
        registry = build_default_registry(MagicMock)

        assert set(registry.platforms()) == {MusicPlatform.SPOTIFY, MusicPlatform.DEEZER}

    async def test_spotify_gets_fresh_client_per_strategy(self) -> None:
        clients = []

        def client_factory() -> MagicMock:
            client = MagicMock()
            client.exchange_code_for_token = AsyncMock(return_value=TokenPair("token"))
            clients.append(client)
            return client

        factory = StrategyFactory(build_default_registry(client_factory))

        first = await factory.resolve("spotify", "code-1")
        second = await factory.resolve("spotify", "code-2")

        assert isinstance(first, SpotifyStrategy)
        assert len(clients) == 2
        clients[0].exchange_code_for_token.assert_awaited_once_with("code-1")
        clients[1].exchange_code_for_token.assert_awaited_once_with("code-2")
        assert second.is_ready

    async def test_deezer_is_unsupported(self) -> None:
        factory = StrategyFactory(build_default_registry(MagicMock))

        with pytest.raises(UnsupportedPlatformError, match="not yet implemented"):
            await factory.resolve("deezer", "abc")

    def test_deezer_constructor_raises(self) -> None:
        with pytest.raises(UnsupportedPlatformError) as exc_info:
            DeezerStrategy("abc")
        assert exc_info.value.platform == "deezer"
