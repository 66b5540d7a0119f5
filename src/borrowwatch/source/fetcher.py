"""Snapshot fetcher for the margin borrow/repay statistics endpoint.

One GET per call, no retries: the ingestion loop's next poll is the only
retry mechanism. The response looks like::

    {"data": {"calculationTime": 1700000000000,
              "coins": [{"asset": "BTC",
                         "totalBorrowInUsdt": 5.0,
                         "totalRepayInUsdt": 3.0}, ...]}}
"""

import asyncio
import json

import aiohttp

from borrowwatch.exceptions import DecodeError, TransportError
from borrowwatch.logging import get_logger
from borrowwatch.models import CoinStats, Snapshot

logger = get_logger(__name__)


def _as_float(value: object) -> float:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return 0.0


def parse_snapshot(text: str) -> Snapshot:
    """Decode a raw response body into a Snapshot.

    Raises:
        DecodeError: body is not JSON, has no integer data.calculationTime,
            or data.coins is not a list.
    """
    try:
        payload = json.loads(text)
    except ValueError as e:
        raise DecodeError(f"invalid snapshot JSON: {e}") from e

    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        raise DecodeError("snapshot has no 'data' object")

    calc_time = data.get("calculationTime")
    if isinstance(calc_time, bool) or not isinstance(calc_time, int):
        raise DecodeError(f"snapshot has invalid calculationTime: {calc_time!r}")

    raw_coins = data.get("coins")
    if raw_coins is None:
        raw_coins = []
    elif not isinstance(raw_coins, list):
        raise DecodeError(f"snapshot coins is not a list: {type(raw_coins).__name__}")

    coins: list[CoinStats] = []
    for entry in raw_coins:
        asset = entry.get("asset") if isinstance(entry, dict) else None
        if not isinstance(asset, str) or not asset:
            logger.warning("snapshot_entry_without_asset", entry=entry)
            continue
        coins.append(
            CoinStats(
                asset=asset,
                total_borrow=_as_float(entry.get("totalBorrowInUsdt")),
                total_repay=_as_float(entry.get("totalRepayInUsdt")),
            )
        )

    return Snapshot(calculation_time=calc_time, coins=coins)


class SnapshotFetcher:
    """Fetches statistics snapshots over HTTP with aiohttp.

    Args:
        endpoint: URL of the statistics endpoint.
        session: Optional externally managed session. When omitted the
            fetcher creates its own on first use and closes it in close().
    """

    def __init__(
        self, endpoint: str, session: aiohttp.ClientSession | None = None
    ) -> None:
        self._endpoint = endpoint
        self._session = session
        self._owns_session = session is None

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def close(self) -> None:
        """Close the session if this fetcher created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def fetch(self, endpoint: str | None = None) -> str:
        """GET the endpoint and return the raw body.

        Raises:
            TransportError: on connection failure, timeout or HTTP status >= 400.
        """
        url = endpoint or self._endpoint
        session = self._get_session()
        try:
            async with session.get(url) as resp:
                resp.raise_for_status()
                return await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"GET {url} failed: {e!r}") from e

    async def fetch_snapshot(self) -> Snapshot:
        """Fetch and decode one snapshot."""
        text = await self.fetch()
        return parse_snapshot(text)
