"""Page route serving the rendered dashboard."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from borrowwatch.catalog import AssetCatalog
from borrowwatch.dashboard.renderer import DashboardRenderer

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def dashboard_index(request: Request) -> HTMLResponse:
    """Render one chart per tracked asset. Every request re-reads all records."""
    renderer: DashboardRenderer = request.app.state.renderer
    catalog: AssetCatalog = request.app.state.catalog

    # Disk reads and plotly serialization stay off the event loop
    html = await asyncio.to_thread(renderer.render, catalog.assets)
    return HTMLResponse(content=html)
