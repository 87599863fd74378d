"""Adjacency and range queries over a store adapter."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .adapter import LogEntriesAdapter
from .errors import InvalidWindow
from .models import Direction, LogEntryDocument, TimeKey
from .sources import SourceConfiguration
from .time_key import compare_time_keys
from .typed_json import LogEntryQuery

logger = logging.getLogger(__name__)


async def fetch_adjacent(
    adapter: LogEntriesAdapter,
    source: SourceConfiguration,
    fields: Sequence[str],
    anchor: TimeKey,
    direction: Direction,
    max_count: int,
    *,
    filter_query: LogEntryQuery | None = None,
    highlight_query: LogEntryQuery | None = None,
) -> list[LogEntryDocument]:
    """Fetch up to max_count documents strictly beyond anchor.

    Results are in traversal order: ascending when going forward,
    descending when going backward. Non-positive counts short-circuit
    without touching the store.
    """
    if max_count <= 0:
        return []

    logger.debug(
        "fetch_adjacent anchor=%s direction=%s max_count=%d",
        anchor,
        direction.value,
        max_count,
    )
    documents = await adapter.fetch_adjacent(
        source,
        fields,
        anchor,
        direction,
        max_count,
        filter_query=filter_query,
        highlight_query=highlight_query,
    )
    return list(documents)


def in_ascending_order(
    documents: Sequence[LogEntryDocument], direction: Direction
) -> list[LogEntryDocument]:
    """Normalize a batch from fetch_adjacent to ascending key order."""
    if direction is Direction.BACKWARD:
        return list(reversed(documents))
    return list(documents)


async def fetch_range(
    adapter: LogEntriesAdapter,
    source: SourceConfiguration,
    fields: Sequence[str],
    start: TimeKey,
    end: TimeKey,
    *,
    filter_query: LogEntryQuery | None = None,
    highlight_query: LogEntryQuery | None = None,
) -> list[LogEntryDocument]:
    """Fetch every document with start <= key <= end, ascending."""
    if compare_time_keys(start, end) > 0:
        raise InvalidWindow("range start must not be after range end")

    logger.debug("fetch_range start=%s end=%s", start, end)
    documents = await adapter.fetch_range(
        source,
        fields,
        start,
        end,
        filter_query=filter_query,
        highlight_query=highlight_query,
    )
    return list(documents)
