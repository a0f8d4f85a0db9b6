"""Custom exception handlers for the FastAPI application.

Domain exceptions become HTTP responses here, so routers just raise:

- ValidationError, request validation, unknown/unsupported platform -> 400
- AuthenticationError, StrategyInitError -> 401
- EntityNotFoundException -> 404
- ExternalServiceError -> 502
- anything else -> 500 with a generic body, after a random delay

None of the bodies carry internal error details; those only go to the logs.
"""

import asyncio
import logging
import random

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from musicstats.config import Settings, get_settings
from musicstats.domain.exceptions import (
    AuthenticationError,
    EntityNotFoundException,
    ExternalServiceError,
    PlatformError,
    StrategyInitError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An internal error occurred."


def _settings_for(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


# Hey future me - the random pause before a 500 makes response timing useless for probing
# which inputs hit which failure path. It only applies to UNEXPECTED errors; 4xx answer fast.
async def _enumeration_delay(request: Request) -> None:
    api = _settings_for(request).api
    low, high = sorted((api.error_delay_min, api.error_delay_max))
    if high > 0:
        await asyncio.sleep(random.uniform(low, high))  # nosec B311 - not crypto


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers mapping domain exceptions to HTTP responses.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.warning(
            "Validation error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "field": exc.field},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message}
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        fields = [".".join(str(part) for part in error.get("loc", ())) for error in errors]
        logger.warning(
            "Request validation failed at %s: %s",
            request.url.path,
            fields,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid request", "fields": fields},
        )

    @app.exception_handler(PlatformError)
    async def platform_error_handler(request: Request, exc: PlatformError) -> JSONResponse:
        logger.warning(
            "Platform error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "platform": exc.platform},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message}
        )

    @app.exception_handler(EntityNotFoundException)
    async def not_found_handler(
        request: Request, exc: EntityNotFoundException
    ) -> JSONResponse:
        logger.info(
            "Not found at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
            extra={
                "path": request.url.path,
                "entity_type": exc.entity_type,
                "entity_id": exc.entity_id,
            },
        )
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        logger.warning(
            "Authentication failed at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Authorization with the music platform failed."},
        )

    @app.exception_handler(StrategyInitError)
    async def strategy_init_error_handler(
        request: Request, exc: StrategyInitError
    ) -> JSONResponse:
        logger.warning(
            "Platform strategy init failed at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "platform": exc.platform},
        )
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Authorization with the music platform failed."},
        )

    @app.exception_handler(ExternalServiceError)
    async def external_service_error_handler(
        request: Request, exc: ExternalServiceError
    ) -> JSONResponse:
        logger.error(
            "External service error at %s: %s",
            request.url.path,
            exc.message,
            extra={
                "path": request.url.path,
                "service": exc.service,
                "status_code": exc.status_code,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": "The music platform is currently unavailable."},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unexpected error at %s",
            request.url.path,
            exc_info=exc,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        await _enumeration_delay(request)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": GENERIC_ERROR_MESSAGE},
        )
