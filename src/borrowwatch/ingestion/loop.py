"""Ingestion loop -- polls the statistics endpoint and appends new observations.

Upstream recomputes its totals on its own schedule, coarser than the poll
interval. ``calculationTime`` is the de-duplication key: a snapshot is
ingested only when it is strictly newer than the last accepted one, so
polling faster than upstream updates never produces duplicate points.

Each cycle is either:
  - FETCH_FAILED: fetch or decode error, nothing written
  - STALE: calculationTime <= last accepted, nothing written
  - ACCEPTED: one observation appended per asset in the snapshot

The recorded observation time is the local ingestion instant, not
calculationTime; it is the x-axis of the dashboard charts.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable

from borrowwatch.exceptions import BorrowWatchError, StorageError
from borrowwatch.logging import cycle_context, get_logger
from borrowwatch.models import CycleOutcome, CycleResult, Snapshot
from borrowwatch.source.fetcher import SnapshotFetcher
from borrowwatch.storage.series_store import SeriesStore

logger = get_logger(__name__)


class IngestionLoop:
    """Sequential fetch-decide-append loop with a fixed delay between cycles.

    The delay is measured from the end of a cycle, so a slow cycle pushes
    the next poll back instead of overlapping it.

    Args:
        fetcher: Snapshot source.
        store: Series persistence.
        poll_interval: Seconds to sleep after each cycle.
        clock: Wall-clock source in Unix seconds.
        sleep: Awaitable sleep used between cycles.
    """

    def __init__(
        self,
        fetcher: SnapshotFetcher,
        store: SeriesStore,
        poll_interval: float = 60.0,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._fetcher = fetcher
        self._store = store
        self._poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep
        # Not persisted: after a restart the first snapshot is always newer
        self._last_accepted_time = int(clock())
        self._cycle = 0
        self._running = False
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]

    @property
    def last_accepted_time(self) -> int:
        return self._last_accepted_time

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Run the loop as a background task."""
        if self._running:
            logger.warning("ingestion_loop_already_running")
            return
        self._running = True
        self._task = asyncio.create_task(self._run_loop())
        logger.info("ingestion_loop_started", poll_interval=self._poll_interval)

    async def stop(self) -> None:
        """Stop the loop and wait for the background task to finish."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("ingestion_loop_stopped")

    async def run(self) -> None:
        """Run the loop in the current task until stop() or cancellation."""
        self._running = True
        await self._run_loop()

    async def _run_loop(self) -> None:
        while self._running:
            try:
                await self.run_cycle()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.error("ingestion_cycle_error", exc_info=True)
            if self._running:
                await self._sleep(self._poll_interval)

    async def run_cycle(self) -> CycleResult:
        """Execute one poll and, if the snapshot is new, append it."""
        self._cycle += 1
        with cycle_context(self._cycle):
            return await self._poll()

    async def _poll(self) -> CycleResult:
        try:
            snapshot = await self._fetcher.fetch_snapshot()
        except BorrowWatchError as e:
            logger.warning("snapshot_fetch_failed", error=str(e))
            return CycleResult(outcome=CycleOutcome.FETCH_FAILED)

        if snapshot.calculation_time <= self._last_accepted_time:
            logger.info(
                "snapshot_waiting",
                calculation_time=snapshot.calculation_time,
                last_accepted=self._last_accepted_time,
            )
            return CycleResult(
                outcome=CycleOutcome.STALE,
                calculation_time=snapshot.calculation_time,
            )

        now = int(self._clock())
        # Record rewrites run off the event loop shared with the dashboard
        result = await asyncio.to_thread(self._ingest, snapshot, now)
        # Advanced even when some assets failed
        self._last_accepted_time = snapshot.calculation_time
        logger.info(
            "snapshot_accepted",
            calculation_time=snapshot.calculation_time,
            written=len(result.written),
            failed=len(result.failed),
        )
        return result

    def _ingest(self, snapshot: Snapshot, now: int) -> CycleResult:
        result = CycleResult(
            outcome=CycleOutcome.ACCEPTED,
            calculation_time=snapshot.calculation_time,
        )
        for coin in snapshot.coins:
            try:
                series = self._store.load(coin.asset)
                series.append(coin.total_borrow, coin.total_repay, now)
                self._store.save(coin.asset, series)
            except StorageError as e:
                logger.warning("asset_ingest_failed", asset=coin.asset, error=str(e))
                result.failed.append(coin.asset)
                continue
            result.written.append(coin.asset)

        return result
