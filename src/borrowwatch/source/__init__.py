"""Upstream statistics source -- HTTP fetch and snapshot decoding."""

from borrowwatch.source.fetcher import SnapshotFetcher, parse_snapshot

__all__ = ["SnapshotFetcher", "parse_snapshot"]
