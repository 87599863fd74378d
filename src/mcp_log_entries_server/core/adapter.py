"""Store adapter interface consumed by the log entries core."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .models import Direction, LogEntryDocument, LogItemHit, LogSummaryBucket, TimeKey
from .sources import SourceConfiguration
from .typed_json import LogEntryQuery


class LogEntriesAdapter(Protocol):
    """Narrow interface to the document store.

    Implementations raise StoreUnavailable when a query cannot execute and
    never retry on their own behalf.
    """

    async def fetch_adjacent(
        self,
        source: SourceConfiguration,
        fields: Sequence[str],
        anchor: TimeKey,
        direction: Direction,
        max_count: int,
        filter_query: LogEntryQuery | None = None,
        highlight_query: LogEntryQuery | None = None,
    ) -> list[LogEntryDocument]:
        """Return up to max_count documents strictly beyond anchor.

        Forward results are ascending, backward results descending.
        """
        ...

    async def fetch_range(
        self,
        source: SourceConfiguration,
        fields: Sequence[str],
        start: TimeKey,
        end: TimeKey,
        filter_query: LogEntryQuery | None = None,
        highlight_query: LogEntryQuery | None = None,
    ) -> list[LogEntryDocument]:
        """Return all documents with start <= key <= end, ascending."""
        ...

    async def bucketize(
        self,
        source: SourceConfiguration,
        start: int,
        end: int,
        bucket_size: int,
        filter_query: LogEntryQuery | None = None,
    ) -> list[LogSummaryBucket]:
        """Count matching documents per fixed-width bucket of [start, end)."""
        ...

    async def fetch_by_id(self, source: SourceConfiguration, item_id: str) -> LogItemHit:
        """Return the raw stored document or raise LogItemNotFound."""
        ...
