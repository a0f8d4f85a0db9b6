"""FastAPI application factory and entry point."""

import uvicorn
from fastapi import FastAPI

from musicstats import __version__
from musicstats.api import api_router
from musicstats.api.exception_handlers import register_exception_handlers
from musicstats.api.health_checks import register_health_endpoints
from musicstats.config import Settings, get_settings
from musicstats.infrastructure.lifecycle import lifespan
from musicstats.infrastructure.observability import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings to run with. Defaults to the cached environment settings;
            tests pass their own so they never touch the real environment.

    Returns:
        Configured application. Resources are created by the lifespan on startup.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Music Statistics Service",
        description="Stores a user's top artists, top tracks and favorite genre "
        "from their streaming platform.",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url=None,
    )
    app.state.settings = settings

    # Starlette runs the LAST added middleware first, so request logging wraps everything.
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)
    register_health_endpoints(app, settings)
    app.include_router(api_router)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "musicstats.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
