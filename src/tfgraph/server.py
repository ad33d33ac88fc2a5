from __future__ import annotations

from fastapi import FastAPI

from .api import create_api_app
from .core.store import TransformStore
from .core.viewer_settings import ViewerSettingsStore


def create_app(
    store: TransformStore | None = None,
    settings: ViewerSettingsStore | None = None,
) -> FastAPI:
    """Create the full app. The browser viewer is served separately."""
    return create_api_app(store=store, settings=settings)


# Convenience for uvicorn: `uvicorn tfgraph.server:app`
app = create_app()
