"""Health and readiness endpoints."""

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from musicstats.api.schemas import HealthResponse
from musicstats.config import Settings
from musicstats.infrastructure.observability import (
    HealthStatus,
    check_consumer_health,
    check_database_health,
)

logger = logging.getLogger(__name__)


def register_health_endpoints(app: FastAPI, settings: Settings) -> None:
    """Register /health (liveness) and /ready (dependency checks) on the app.

    Args:
        app: FastAPI application instance
        settings: Application settings
    """

    # Liveness only: no DB or broker calls, so a slow dependency never gets the pod restarted.
    @app.get("/health", tags=["Health"], response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        return HealthResponse(status=HealthStatus.HEALTHY.value, app_name=settings.app_name)

    # Yo future me, readiness answers 503 only when the DB is down. A stopped user consumer
    # is DEGRADED: the REST API still serves everything, we just stop learning new links.
    @app.get("/ready", tags=["Health"])
    async def readiness_check() -> JSONResponse:
        checks: dict[str, dict[str, Any]] = {}
        overall_status = HealthStatus.HEALTHY

        db = getattr(app.state, "db", None)
        if db is None:
            checks["database"] = {
                "status": HealthStatus.UNHEALTHY.value,
                "message": "Database not initialized",
            }
            overall_status = HealthStatus.UNHEALTHY
        else:
            db_check = await check_database_health(db)
            checks["database"] = {"status": db_check.status.value, "message": db_check.message}
            if db_check.status == HealthStatus.UNHEALTHY:
                overall_status = HealthStatus.UNHEALTHY

        consumer_check = check_consumer_health(
            getattr(app.state, "user_consumer", None), settings.kafka.enabled
        )
        checks["user_consumer"] = {
            "status": consumer_check.status.value,
            "message": consumer_check.message,
        }
        if (
            consumer_check.status == HealthStatus.DEGRADED
            and overall_status == HealthStatus.HEALTHY
        ):
            overall_status = HealthStatus.DEGRADED

        status_code = 503 if overall_status == HealthStatus.UNHEALTHY else 200
        if status_code == 503:
            logger.warning("Readiness check failed: %s", checks)
        return JSONResponse(
            status_code=status_code,
            content={"status": overall_status.value, "checks": checks},
        )
