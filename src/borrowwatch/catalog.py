"""Tracked asset catalog, discovered once at startup."""

from collections.abc import Iterator

from borrowwatch.logging import get_logger
from borrowwatch.source.fetcher import SnapshotFetcher
from borrowwatch.storage.series_store import SeriesStore

logger = get_logger(__name__)


class AssetCatalog:
    """Frozen, ordered set of asset tickers to chart.

    Assets listed upstream after startup are not picked up until restart.
    """

    def __init__(self, assets: list[str] | tuple[str, ...]) -> None:
        # dict.fromkeys keeps upstream order while dropping duplicates
        self._assets: tuple[str, ...] = tuple(dict.fromkeys(assets))

    @classmethod
    async def discover(cls, fetcher: SnapshotFetcher) -> "AssetCatalog":
        """Build the catalog from one snapshot. Fetch/decode errors propagate."""
        snapshot = await fetcher.fetch_snapshot()
        catalog = cls(snapshot.assets)
        logger.info("assets_discovered", count=len(catalog))
        return catalog

    @property
    def assets(self) -> tuple[str, ...]:
        return self._assets

    def __len__(self) -> int:
        return len(self._assets)

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __contains__(self, asset: object) -> bool:
        return asset in self._assets

    def prepare_storage(self, store: SeriesStore) -> None:
        """Make sure every tracked asset has a record. StorageError propagates."""
        for asset in self._assets:
            store.load(asset)
        logger.info("storage_prepared", assets=len(self._assets))
