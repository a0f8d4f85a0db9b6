"""Application settings loaded from environment variables and .env."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_", env_file=".env", extra="ignore")

    url: str = Field(
        default="sqlite+aiosqlite:///./musicstats.db",
        description="SQLAlchemy async database URL",
    )
    echo: bool = Field(default=False, description="Log every SQL statement")
    pool_pre_ping: bool = Field(default=True, description="Check connections before use")
    pool_size: int = Field(default=5, ge=1, description="PostgreSQL pool size")
    max_overflow: int = Field(default=10, ge=0, description="PostgreSQL pool overflow")
    pool_timeout: int = Field(default=30, ge=1, description="Seconds to wait for a connection")
    pool_recycle: int = Field(default=1800, ge=-1, description="Recycle connections (seconds)")
    auto_create_tables: bool = Field(
        default=True,
        description="Create missing tables on startup (disable when running alembic)",
    )


# Hey future me - client_secret is REQUIRED for the token exchange. We use the confidential
# authorization-code flow (basic auth with id:secret), not PKCE, because the callback is
# handled server side. Empty defaults keep the app bootable in tests; the token exchange
# fails with AuthenticationError if they're missing at runtime.
class SpotifySettings(BaseSettings):
    """Spotify OAuth application settings."""

    model_config = SettingsConfigDict(env_prefix="SPOTIFY_", env_file=".env", extra="ignore")

    client_id: str = Field(default="", description="Spotify application client id")
    client_secret: str = Field(default="", description="Spotify application client secret")
    redirect_uri: str = Field(
        default="http://localhost:8000/api/statistics",
        description="OAuth callback URL registered with Spotify",
    )
    scopes: list[str] = Field(default_factory=lambda: ["user-top-read"])
    request_timeout: float = Field(default=30.0, gt=0)


class KafkaSettings(BaseSettings):
    """Kafka producer/consumer settings."""

    model_config = SettingsConfigDict(env_prefix="KAFKA_", env_file=".env", extra="ignore")

    enabled: bool = Field(default=False, description="Publish and consume Kafka events")
    bootstrap_servers: str = Field(default="kafka:9092")
    client_id: str = Field(default="statistic-service")
    topic: str = Field(default="statistic", description="Topic for stats events")
    user_topic: str = Field(default="user", description="Topic carrying user profile events")
    group_id: str = Field(default="music-statistics-user-group")
    topic_init_retries: int = Field(default=5, ge=1)
    topic_init_delay: float = Field(default=5.0, ge=0)
    poll_timeout: float = Field(default=1.0, gt=0)


class ObservabilitySettings(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(
        env_prefix="OBSERVABILITY_", env_file=".env", extra="ignore"
    )

    log_json_format: bool = Field(default=False, description="Emit JSON log lines")


class ApiSettings(BaseSettings):
    """HTTP API behaviour settings."""

    model_config = SettingsConfigDict(env_prefix="API_", env_file=".env", extra="ignore")

    error_delay_min: float = Field(default=0.5, ge=0)
    error_delay_max: float = Field(default=1.5, ge=0)
    allowed_platforms: list[str] = Field(default_factory=lambda: ["spotify"])

    @field_validator("allowed_platforms")
    @classmethod
    def _lowercase_platforms(cls, value: list[str]) -> list[str]:
        return [platform.strip().lower() for platform in value]


class Settings(BaseSettings):
    """Root application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = Field(default="musicstats")
    environment: Literal["development", "production", "test"] = Field(default="development")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    host: str = Field(default="0.0.0.0")  # nosec B104 - container bind address
    port: int = Field(default=8000)

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    kafka: KafkaSettings = Field(default_factory=KafkaSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    api: ApiSettings = Field(default_factory=ApiSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
