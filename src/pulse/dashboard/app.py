"""FastAPI dashboard application factory."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from pulse.dashboard.routes import api


def create_dashboard_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI dashboard application.

    Route handlers read settings_store, history_store and collector from
    app.state; the caller (main.py or a test) must set them.

    Args:
        lifespan: Optional async context manager for application lifespan events.
                  Used by main.py to inject startup/shutdown logic.

    Returns:
        Configured FastAPI application with the JSON API mounted under /api.
    """
    app = FastAPI(title="Pulse", lifespan=lifespan)
    app.include_router(api.router, prefix="/api")
    return app
