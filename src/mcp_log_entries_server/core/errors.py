"""Error types raised by the log entries core."""

from __future__ import annotations


class LogEntriesError(Exception):
    """Base class for log entries errors."""


class StoreUnavailable(LogEntriesError, RuntimeError):
    """The underlying store could not execute a query."""


class InvalidWindow(LogEntriesError, ValueError):
    """A window size, count or range violates the caller contract."""


class SourceConfigurationMissing(LogEntriesError, LookupError):
    """A referenced source configuration cannot be resolved."""

    def __init__(self, source_id: str) -> None:
        super().__init__(f"Source configuration not found: {source_id!r}")
        self.source_id = source_id


class LogItemNotFound(LogEntriesError, LookupError):
    """No stored document has the requested id."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Log item not found: {item_id!r}")
        self.item_id = item_id


class UnsupportedQuery(LogEntriesError, ValueError):
    """A query clause is outside the subset the store understands."""
