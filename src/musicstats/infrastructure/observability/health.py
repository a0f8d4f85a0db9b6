"""Health checks for the service's dependencies."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy import text

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheck:
    """Result of a health check."""

    name: str
    status: HealthStatus
    message: str


async def check_database_health(db: Any) -> HealthCheck:
    """Check database connectivity.

    Args:
        db: Database instance

    Returns:
        Health check result
    """
    try:
        async with db.session_scope() as session:
            result = await session.execute(text("SELECT 1"))
            result.scalar()

        return HealthCheck(
            name="database",
            status=HealthStatus.HEALTHY,
            message="Database connection successful",
        )

    # The check reports failures as a status instead of raising.
    except Exception as e:
        logger.exception("Database health check failed", extra={"error": str(e)})
        return HealthCheck(
            name="database",
            status=HealthStatus.UNHEALTHY,
            message="Database connection failed",
        )


def check_consumer_health(consumer: Any, kafka_enabled: bool) -> HealthCheck:
    """Report whether the user event consumer is running.

    A disabled Kafka integration is healthy; an enabled one whose consumer
    stopped is only degraded, because the REST API keeps working without it.
    """
    if not kafka_enabled:
        return HealthCheck(
            name="user_consumer", status=HealthStatus.HEALTHY, message="Kafka disabled"
        )
    if consumer is not None and consumer.is_running:
        return HealthCheck(
            name="user_consumer", status=HealthStatus.HEALTHY, message="Consuming"
        )
    return HealthCheck(
        name="user_consumer", status=HealthStatus.DEGRADED, message="Consumer not running"
    )
