"""Ingestion layer -- periodic snapshot polling into the series store."""

from borrowwatch.ingestion.loop import IngestionLoop

__all__ = ["IngestionLoop"]
