"""Platform strategies and the factory that selects them."""

from .deezer_strategy import DeezerStrategy
from .factory import StrategyFactory, StrategyRegistry, build_default_registry
from .spotify_strategy import SpotifyStrategy

__all__ = [
    "DeezerStrategy",
    "SpotifyStrategy",
    "StrategyFactory",
    "StrategyRegistry",
    "build_default_registry",
]
