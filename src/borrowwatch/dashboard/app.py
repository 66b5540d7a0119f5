"""FastAPI dashboard application factory."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from borrowwatch.dashboard.routes import pages


def create_dashboard_app(lifespan: Any = None) -> FastAPI:
    """Create and configure the FastAPI dashboard application.

    Route handlers expect ``app.state.renderer`` (DashboardRenderer) and
    ``app.state.catalog`` (AssetCatalog) to be set, either by the lifespan
    in main.py or directly by the caller.

    Args:
        lifespan: Optional async context manager for application lifespan events.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="Margin Borrow/Repay Dashboard",
        lifespan=lifespan,
    )

    app.include_router(pages.router)

    return app
