"""API routers for different resource types."""

from coverage_engine.api.routers.coverage import router as coverage_router

__all__ = [
    "coverage_router",
]
