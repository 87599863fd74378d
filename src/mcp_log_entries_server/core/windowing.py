"""Windows and pages of documents stitched from adjacency queries.

The store can only answer "the next N documents strictly after/before a
key". Everything here composes those calls so that consecutive pages
neither repeat nor skip a document.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .adapter import LogEntriesAdapter
from .errors import InvalidWindow
from .fetching import fetch_adjacent, in_ascending_order
from .models import AfterCursor, BeforeCursor, Cursor, Direction, LogEntryDocument, TimeKey
from .sources import SourceConfiguration
from .time_key import predecessor, successor
from .typed_json import LogEntryQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DocumentWindow:
    """Ascending documents before a center and from the center onwards."""

    before: list[LogEntryDocument]
    after: list[LogEntryDocument]

    @property
    def documents(self) -> list[LogEntryDocument]:
        return [*self.before, *self.after]


def split_window_size(total_size: int) -> tuple[int, int]:
    """Split a window into (before, after) counts.

    The extra entry of an odd size goes after the center, so the center
    itself always opens the "after" half::

        5 -> (2, 3)    4 -> (2, 2)
    """
    if total_size < 0:
        raise InvalidWindow("window size must be >= 0")
    before = total_size // 2
    return before, total_size - before


async def fetch_documents_around(
    adapter: LogEntriesAdapter,
    source: SourceConfiguration,
    fields: Sequence[str],
    center: TimeKey,
    total_size: int,
    *,
    filter_query: LogEntryQuery | None = None,
    highlight_query: LogEntryQuery | None = None,
) -> DocumentWindow:
    """Fetch a window of total_size documents centered on a key."""
    count_before, count_after = split_window_size(total_size)
    if count_after == 0:
        return DocumentWindow(before=[], after=[])

    # At least one predecessor is fetched even when none is kept: it is the
    # forward anchor, and the halves therefore run in sequence.
    descending = await fetch_adjacent(
        adapter,
        source,
        fields,
        center,
        Direction.BACKWARD,
        max(count_before, 1),
        filter_query=filter_query,
        highlight_query=highlight_query,
    )
    # Only with no predecessor at all is predecessor(center) a safe anchor.
    anchor = descending[0].key if descending else predecessor(center)
    before = in_ascending_order(descending, Direction.BACKWARD) if count_before > 0 else []

    after = await fetch_adjacent(
        adapter,
        source,
        fields,
        anchor,
        Direction.FORWARD,
        count_after,
        filter_query=filter_query,
        highlight_query=highlight_query,
    )

    logger.debug(
        "window around %s: requested %d/%d, got %d/%d",
        center,
        count_before,
        count_after,
        len(before),
        len(after),
    )
    return DocumentWindow(before=before, after=after)


def _cursor_anchor(cursor: Cursor | None, start: int, end: int) -> tuple[TimeKey, Direction]:
    if cursor is None:
        return predecessor(TimeKey(time=start)), Direction.FORWARD
    if isinstance(cursor, AfterCursor):
        if cursor.after == "first":
            return predecessor(TimeKey(time=start)), Direction.FORWARD
        return cursor.after, Direction.FORWARD
    if isinstance(cursor, BeforeCursor):
        if cursor.before == "last":
            return successor(TimeKey(time=end)), Direction.BACKWARD
        return cursor.before, Direction.BACKWARD
    raise TypeError(f"Unsupported cursor: {cursor!r}")


async def fetch_documents_page(
    adapter: LogEntriesAdapter,
    source: SourceConfiguration,
    fields: Sequence[str],
    cursor: Cursor | None,
    size: int,
    *,
    start: int,
    end: int,
    filter_query: LogEntryQuery | None = None,
    highlight_query: LogEntryQuery | None = None,
) -> list[LogEntryDocument]:
    """Fetch one ascending page of documents next to a cursor.

    No cursor means the first page of the window. The caller restricts
    filter_query to [start, end]; the bounds here only place the
    "first"/"last" anchors.
    """
    if size < 0:
        raise InvalidWindow("page size must be >= 0")
    if start > end:
        raise InvalidWindow("start must not be after end")

    anchor, direction = _cursor_anchor(cursor, start, end)
    documents = await fetch_adjacent(
        adapter,
        source,
        fields,
        anchor,
        direction,
        size,
        filter_query=filter_query,
        highlight_query=highlight_query,
    )
    return in_ascending_order(documents, direction)
