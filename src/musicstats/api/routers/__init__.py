"""API router initialization."""

# Hey future me, this aggregates the sub-routers. main.py mounts api_router at the root, so the
# prefix given here is the full public path.
from fastapi import APIRouter

from musicstats.api.routers import statistics

api_router = APIRouter()

api_router.include_router(statistics.router, prefix="/api/statistics", tags=["Statistics"])

__all__ = [
    "api_router",
    "statistics",
]
