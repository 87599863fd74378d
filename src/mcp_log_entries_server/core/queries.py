"""Builders for the filter and highlight queries sent to the store."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from .typed_json import LogEntryQuery


def create_highlight_query(phrase: str, fields: Sequence[str]) -> LogEntryQuery:
    """Phrase query across the given fields."""
    return {
        "multi_match": {
            "fields": list(fields),
            "lenient": True,
            "query": phrase,
            "type": "phrase",
        }
    }


def create_time_range_query(field: str, start: int, end: int) -> LogEntryQuery:
    """Inclusive [start, end] range on a millisecond timestamp field."""
    return {"range": {field: {"gte": start, "lte": end, "format": "epoch_millis"}}}


def combine_queries(
    *queries: LogEntryQuery | None,
    occur: Literal["filter", "must"] = "filter",
) -> LogEntryQuery | None:
    """AND together the non-empty queries."""
    present = [q for q in queries if q]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return {"bool": {occur: present}}
