"""Application use cases - business logic orchestration."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

TRequest = TypeVar("TRequest")
TResponse = TypeVar("TResponse")


class UseCase(ABC, Generic[TRequest, TResponse]):
    """Base class for all use cases following command pattern."""

    @abstractmethod
    async def execute(self, request: TRequest) -> TResponse:
        """Execute the use case with the given request."""
        pass


# Import concrete use cases (after UseCase definition to avoid circular imports)
from musicstats.application.use_cases.cleanup_user_data import (  # noqa: E402
    CleanupResult,
    CleanupUserDataRequest,
    CleanupUserDataUseCase,
)
from musicstats.application.use_cases.fetch_user_music_stats import (  # noqa: E402
    FetchUserMusicStatsRequest,
    FetchUserMusicStatsResponse,
    FetchUserMusicStatsUseCase,
)

__all__ = [
    "CleanupResult",
    "CleanupUserDataRequest",
    "CleanupUserDataUseCase",
    "FetchUserMusicStatsRequest",
    "FetchUserMusicStatsResponse",
    "FetchUserMusicStatsUseCase",
    "UseCase",
]
