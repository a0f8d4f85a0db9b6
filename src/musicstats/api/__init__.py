"""API module: routers, schemas, dependencies, exception handlers and health checks."""

from musicstats.api.routers import api_router, statistics

__all__ = [
    "api_router",
    "statistics",
]
