"""Exceptions raised by the fetch, decode and storage layers.

Kept in one module so the ingestion loop, the renderer and the entry
point can catch them without importing each other.
"""


class BorrowWatchError(Exception):
    """Base exception for all borrowwatch errors."""


class TransportError(BorrowWatchError):
    """Raised when the statistics endpoint cannot be reached or answers with an HTTP error."""


class DecodeError(BorrowWatchError):
    """Raised when an upstream response is not the expected JSON document."""


class StorageError(BorrowWatchError):
    """Raised when a series record cannot be created, read, decoded or written."""
