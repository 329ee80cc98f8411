"""FastAPI dependency injection — sweeper and settings live on app.state."""

from __future__ import annotations

from fastapi import Request

from config.settings import Settings
from src.sweeper.pipeline import DustSweeper


def get_sweeper(request: Request) -> DustSweeper:
    """Return the app-wide DustSweeper (overridable in tests)."""
    return request.app.state.sweeper


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
