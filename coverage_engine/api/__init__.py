"""FastAPI application for the coverage engine."""

from coverage_engine.api.main import app, create_app

__all__ = ["app", "create_app"]
