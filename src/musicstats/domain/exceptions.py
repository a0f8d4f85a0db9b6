"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we keep message as an attribute so handlers can read it without parsing
    # str(exc). Don't raise this directly, always pick a subclass so callers catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(DomainException):
    """Input failed validation at the boundary (user id, rank, platform, state).

    HTTP Status: 400
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidStateException(DomainException):
    """An object was used in a state that doesn't allow the operation.

    Example: calling get_stats() on a strategy before init().
    """

    pass


class ConfigurationError(DomainException):
    """Required configuration is missing or infrastructure could not be set up."""

    pass


class AuthenticationError(DomainException):
    """OAuth token exchange or refresh failed."""

    pass


class TokenRefreshException(AuthenticationError):
    """Raised when the refresh token is rejected and re-authentication is required."""

    def __init__(
        self,
        message: str = "Token refresh failed. Please re-authenticate with Spotify.",
        error_code: str | None = None,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.http_status = http_status


class ExternalServiceError(DomainException):
    """The streaming platform API failed (network error, 5xx, unexpected 4xx)."""

    def __init__(
        self, message: str, service: str = "spotify", status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class PlatformError(DomainException):
    """Base for platform selection errors."""

    def __init__(self, message: str, platform: str) -> None:
        super().__init__(message)
        self.platform = platform


class UnknownPlatformError(PlatformError):
    """No strategy is registered under the requested platform name."""

    def __init__(self, platform: str) -> None:
        super().__init__(f"Unknown platform: {platform}", platform)


class UnsupportedPlatformError(PlatformError):
    """The platform is known but its strategy is not implemented yet."""

    def __init__(self, platform: str, message: str | None = None) -> None:
        super().__init__(message or f"{platform} strategy not yet implemented", platform)


class StrategyInitError(DomainException):
    """A platform strategy could not obtain an access token."""

    def __init__(self, platform: str, message: str | None = None) -> None:
        super().__init__(message or f"Failed to initialize {platform} strategy")
        self.platform = platform


__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "DomainException",
    "EntityNotFoundException",
    "ExternalServiceError",
    "InvalidStateException",
    "PlatformError",
    "StrategyInitError",
    "TokenRefreshException",
    "UnknownPlatformError",
    "UnsupportedPlatformError",
    "ValidationError",
]
