"""Series persistence layer."""

from borrowwatch.storage.series_store import SeriesStore

__all__ = ["SeriesStore"]
