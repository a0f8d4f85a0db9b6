"""Tests for application settings."""

import pytest

from musicstats.config import ApiSettings, KafkaSettings, Settings, SpotifySettings


class TestSettings:
    """Tests for defaults and environment overrides."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("KAFKA_ENABLED", raising=False)

        kafka = KafkaSettings(_env_file=None)
        spotify = SpotifySettings(_env_file=None)

        assert kafka.enabled is False
        assert kafka.topic == "statistic"
        assert kafka.user_topic == "user"
        assert spotify.scopes == ["user-top-read"]

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KAFKA_ENABLED", "true")
        monkeypatch.setenv("KAFKA_BOOTSTRAP_SERVERS", "broker:29092")
        monkeypatch.setenv("SPOTIFY_CLIENT_ID", "abc")

        settings = Settings(_env_file=None)

        assert settings.kafka.enabled is True
        assert settings.kafka.bootstrap_servers == "broker:29092"
        assert settings.spotify.client_id == "abc"

    def test_allowed_platforms_are_lowercased(self) -> None:
        api = ApiSettings(allowed_platforms=[" Spotify", "DEEZER"])

        assert api.allowed_platforms == ["spotify", "deezer"]
