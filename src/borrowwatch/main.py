"""Entry point for the borrow/repay statistics collector.

Startup is sequential and any failure in it is fatal:
1. AppSettings (configuration)
2. Logging setup
3. SnapshotFetcher, SeriesStore, IngestionLoop, DashboardRenderer
4. Storage directory creation
5. Asset discovery (one snapshot fetch)
6. Storage pass creating a record for every discovered asset

Only then does uvicorn start serving the dashboard. The ingestion loop
runs as a background task inside the FastAPI lifespan, sharing the
event loop with the request handlers.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from borrowwatch.catalog import AssetCatalog
from borrowwatch.config import AppSettings
from borrowwatch.dashboard.renderer import DashboardRenderer
from borrowwatch.exceptions import BorrowWatchError
from borrowwatch.ingestion.loop import IngestionLoop
from borrowwatch.logging import get_logger, setup_logging
from borrowwatch.source.fetcher import SnapshotFetcher
from borrowwatch.storage.series_store import SeriesStore


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build all components from settings.

    Note: Does NOT touch the network or the filesystem -- that happens
    in _startup().

    Args:
        settings: Application-wide settings.

    Returns:
        Dict mapping component names to instances.
    """
    fetcher = SnapshotFetcher(settings.source.endpoint)
    store = SeriesStore(settings.storage.data_dir)
    ingestion_loop = IngestionLoop(
        fetcher,
        store,
        poll_interval=settings.ingestion.poll_interval,
    )
    renderer = DashboardRenderer(store, title_template=settings.dashboard.title_template)

    return {
        "fetcher": fetcher,
        "store": store,
        "ingestion_loop": ingestion_loop,
        "renderer": renderer,
    }


async def _startup(components: dict[str, Any]) -> AssetCatalog:
    """Create storage, discover assets and make sure each has a record.

    Raises:
        BorrowWatchError: any fetch, decode or storage failure.
    """
    store: SeriesStore = components["store"]
    store.initialize()

    catalog = await AssetCatalog.discover(components["fetcher"])
    catalog.prepare_storage(store)
    return catalog


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the ingestion loop for as long as the dashboard is served."""
    logger = get_logger("borrowwatch.main")
    components = app.state.components
    ingestion_loop: IngestionLoop = components["ingestion_loop"]

    app.state.renderer = components["renderer"]

    await ingestion_loop.start()
    logger.info("lifespan_started", assets=len(app.state.catalog))

    yield

    await ingestion_loop.stop()
    await components["fetcher"].close()
    logger.info("borrowwatch_stopped")


async def run() -> None:
    """Start up, then serve the dashboard with ingestion in the background."""
    # 1. Load settings
    settings = AppSettings()

    # 2. Setup logging
    setup_logging(settings.log_level)
    logger = get_logger("borrowwatch.main")

    # 3. Build components
    components = _build_components(settings)

    # 4-6. Storage, discovery, storage pass
    try:
        catalog = await _startup(components)
    except BorrowWatchError as e:
        logger.error("startup_failed", error=str(e))
        await components["fetcher"].close()
        raise SystemExit(1) from e

    from borrowwatch.dashboard.app import create_dashboard_app

    app = create_dashboard_app(lifespan=lifespan)
    app.state.settings = settings
    app.state.components = components
    app.state.catalog = catalog

    logger.info(
        "starting_dashboard",
        host=settings.dashboard.host,
        port=settings.dashboard.port,
        url=f"http://localhost:{settings.dashboard.port}",
    )

    config = uvicorn.Config(
        app,
        host=settings.dashboard.host,
        port=settings.dashboard.port,
        log_level="warning",  # Suppress uvicorn access logs
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point with a top-level error boundary."""
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass
    except Exception:
        get_logger("borrowwatch.main").critical("unhandled_fault", exc_info=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
