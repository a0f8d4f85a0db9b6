"""Observability: structured logging, HTTP middleware and health checks."""

from musicstats.infrastructure.observability.health import (
    HealthCheck,
    HealthStatus,
    check_consumer_health,
    check_database_health,
)
from musicstats.infrastructure.observability.logging import (
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)
from musicstats.infrastructure.observability.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)

__all__ = [
    "HealthCheck",
    "HealthStatus",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "check_consumer_health",
    "check_database_health",
    "configure_logging",
    "get_correlation_id",
    "set_correlation_id",
]
