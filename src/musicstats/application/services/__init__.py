"""Application services."""

from musicstats.application.services.music_stats_service import MusicStatsService
from musicstats.application.services.spotify_auth_service import SpotifyAuthService
from musicstats.application.services.user_service import UserService

__all__ = ["MusicStatsService", "SpotifyAuthService", "UserService"]
