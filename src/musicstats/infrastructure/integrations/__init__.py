"""External platform integrations."""

from musicstats.infrastructure.integrations.spotify_client import SpotifyClient

__all__ = ["SpotifyClient"]
