from __future__ import annotations

from fastapi import FastAPI

from .api import create_api_app
from .settings import SettingsStore


def create_app(settings: SettingsStore | None = None) -> FastAPI:
    """Create the full app (currently API-only)."""
    return create_api_app(settings)


# Convenience for uvicorn: `uvicorn smilkit.server:app`
app = create_app()
