"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into domain calls,
and return JSON-serializable data structures.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from mcp_log_entries_server.core.domain import LogEntriesDomain
from mcp_log_entries_server.core.models import (
    AfterCursor,
    BeforeCursor,
    ConstantSegment,
    Cursor,
    FieldColumnValue,
    HighlightRequest,
    LogColumnValue,
    LogEntriesItem,
    LogEntry,
    LogSummaryBucket,
    LogSummaryHighlightBucket,
    MessageColumnValue,
    MessageSegment,
    TimeKey,
)
from mcp_log_entries_server.core.queries import create_highlight_query
from mcp_log_entries_server.core.time_window import parse_iso_dt, resolve_time_range_millis, to_epoch_millis
from mcp_log_entries_server.core.typed_json import LogEntryQuery

HARD_LIMIT = 5000
DEFAULT_BUCKET_COUNT = 60


def _parse_key(value: Mapping[str, Any] | None, *, name: str) -> TimeKey | None:
    """Parse {"time": ms, "tiebreaker": n} into a TimeKey."""
    if value is None:
        return None
    try:
        return TimeKey(time=int(value["time"]), tiebreaker=int(value.get("tiebreaker", 0)))
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(
            f"{name} must look like {{\"time\": <epoch ms>, \"tiebreaker\": <int>}}"
        ) from e


def _require_key(value: Mapping[str, Any] | None, *, name: str) -> TimeKey:
    key = _parse_key(value, name=name)
    if key is None:
        raise ValueError(f"{name} is required")
    return key


def _parse_cursor(
    before: Mapping[str, Any] | str | None,
    after: Mapping[str, Any] | str | None,
) -> Cursor | None:
    if before is not None and after is not None:
        raise ValueError("Use either before or after, not both.")
    if before is not None:
        if before == "last":
            return BeforeCursor(before="last")
        return BeforeCursor(before=_require_key(before, name="before"))
    if after is not None:
        if after == "first":
            return AfterCursor(after="first")
        return AfterCursor(after=_require_key(after, name="after"))
    return None


def _resolve_size(size: int | None) -> int | None:
    if size is None:
        return None
    if size < 0:
        raise ValueError("size must be >= 0")
    return min(size, HARD_LIMIT)


def _window(selectors: Mapping[str, Any]) -> tuple[int, int]:
    return resolve_time_range_millis(**{k: v for k, v in selectors.items() if v is not None})


def _build_filter(
    filter_query: LogEntryQuery | None, contains: str | None
) -> LogEntryQuery | None:
    """AND a free-text phrase over all fields onto an optional DSL filter."""
    if not contains:
        return filter_query
    phrase = create_highlight_query(contains, ["*"])
    if not filter_query:
        return phrase
    return {"bool": {"filter": [filter_query, phrase]}}


def _key_to_dict(key: TimeKey) -> dict[str, int]:
    return {"time": key.time, "tiebreaker": key.tiebreaker}


def _segment_to_dict(segment: MessageSegment) -> dict[str, Any]:
    if isinstance(segment, ConstantSegment):
        return {"constant": segment.constant}
    return {"field": segment.field, "value": segment.value, "highlights": segment.highlights}


def _column_to_dict(column: LogColumnValue) -> dict[str, Any]:
    if isinstance(column, MessageColumnValue):
        return {
            "column_id": column.column_id,
            "message": [_segment_to_dict(s) for s in column.message],
        }
    if isinstance(column, FieldColumnValue):
        return {
            "column_id": column.column_id,
            "field": column.field,
            "value": column.value,
            "highlights": column.highlights,
        }
    return {"column_id": column.column_id, "timestamp": column.timestamp}


def _entry_to_dict(entry: LogEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "cursor": _key_to_dict(entry.cursor),
        "columns": [_column_to_dict(c) for c in entry.columns],
    }


def _entries_payload(entries: Sequence[LogEntry]) -> dict[str, Any]:
    out: dict[str, Any] = {
        "count": len(entries),
        "entries": [_entry_to_dict(e) for e in entries],
    }
    if entries:
        out["top_cursor"] = _key_to_dict(entries[0].cursor)
        out["bottom_cursor"] = _key_to_dict(entries[-1].cursor)
    return out


def _bucket_to_dict(bucket: LogSummaryBucket) -> dict[str, Any]:
    return {
        "start": bucket.start,
        "end": bucket.end,
        "entries_count": bucket.entries_count,
        "top_entry_keys": [_key_to_dict(k) for k in bucket.top_entry_keys],
    }


def _highlight_bucket_to_dict(bucket: LogSummaryHighlightBucket) -> dict[str, Any]:
    return {
        "start": bucket.start,
        "end": bucket.end,
        "entries_count": bucket.entries_count,
        "representative_key": _key_to_dict(bucket.representative_key),
    }


def _item_to_dict(item: LogEntriesItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "index": item.index,
        "key": _key_to_dict(item.key),
        "fields": [{"field": f.field, "value": f.value} for f in item.fields],
    }


async def get_log_entries_impl(
    domain: LogEntriesDomain,
    *,
    source_id: str,
    before: Mapping[str, Any] | str | None = None,
    after: Mapping[str, Any] | str | None = None,
    size: int | None = None,
    filter_query: LogEntryQuery | None = None,
    contains: str | None = None,
    highlight: str | None = None,
    **selectors: Any,
) -> dict[str, Any]:
    """Implementation for the `get_log_entries` MCP tool.

    Pass the returned ``bottom_cursor`` as ``after`` (or ``top_cursor`` as
    ``before``) to fetch the next (previous) page without repeats.
    """
    start, end = _window(selectors)
    entries = await domain.get_entries(
        source_id,
        start_date=start,
        end_date=end,
        filter_query=_build_filter(filter_query, contains),
        cursor=_parse_cursor(before, after),
        size=_resolve_size(size),
        highlight_term=highlight,
    )
    return _entries_payload(entries)


async def get_log_entries_around_impl(
    domain: LogEntriesDomain,
    *,
    source_id: str,
    center: Mapping[str, Any] | None = None,
    center_time: str | None = None,
    size: int | None = None,
    filter_query: LogEntryQuery | None = None,
    contains: str | None = None,
    highlight: str | None = None,
    **selectors: Any,
) -> dict[str, Any]:
    """Implementation for the `get_log_entries_around` MCP tool.

    The center is either a full key or an ISO-8601 time (tiebreaker 0).
    """
    if center is None and center_time is None:
        raise ValueError("Provide center or center_time.")
    if center is not None and center_time is not None:
        raise ValueError("Use either center or center_time, not both.")
    key = (
        _require_key(center, name="center")
        if center is not None
        else TimeKey(time=to_epoch_millis(parse_iso_dt(center_time)))
    )

    start, end = _window(selectors)
    entries = await domain.get_entries_around(
        source_id,
        key,
        start_date=start,
        end_date=end,
        size=_resolve_size(size),
        filter_query=_build_filter(filter_query, contains),
        highlight_term=highlight,
    )
    return _entries_payload(entries)


async def get_log_entries_between_impl(
    domain: LogEntriesDomain,
    *,
    source_id: str,
    start_key: Mapping[str, Any],
    end_key: Mapping[str, Any],
    filter_query: LogEntryQuery | None = None,
    contains: str | None = None,
) -> dict[str, Any]:
    """Implementation for the `get_log_entries_between` MCP tool."""
    entries = await domain.get_entries_between(
        source_id,
        _require_key(start_key, name="start_key"),
        _require_key(end_key, name="end_key"),
        filter_query=_build_filter(filter_query, contains),
    )
    return _entries_payload(entries)


async def get_log_entry_highlights_impl(
    domain: LogEntriesDomain,
    *,
    source_id: str,
    start_key: Mapping[str, Any],
    end_key: Mapping[str, Any],
    highlights: Sequence[Mapping[str, Any]],
    filter_query: LogEntryQuery | None = None,
) -> dict[str, Any]:
    """Implementation for the `get_log_entry_highlights` MCP tool."""
    requests: list[HighlightRequest] = []
    for h in highlights:
        query = str(h.get("query", "")).strip()
        if not query:
            raise ValueError("every highlight needs a non-empty query")
        requests.append(
            HighlightRequest(
                query=query,
                count_before=int(h.get("count_before", 0)),
                count_after=int(h.get("count_after", 0)),
            )
        )

    results = await domain.get_entry_highlights(
        source_id,
        _require_key(start_key, name="start_key"),
        _require_key(end_key, name="end_key"),
        requests,
        filter_query=filter_query,
    )
    return {
        "highlights": [
            {"query": r.query, **_entries_payload(entries)}
            for r, entries in zip(requests, results, strict=True)
        ]
    }


def _resolve_bucket_size(start: int, end: int, bucket_size: int | None) -> int:
    if bucket_size is not None:
        if bucket_size <= 0:
            raise ValueError("bucket_size must be > 0")
        return bucket_size
    return max(1, -(-(end - start + 1) // DEFAULT_BUCKET_COUNT))


async def get_log_summary_impl(
    domain: LogEntriesDomain,
    *,
    source_id: str,
    bucket_size: int | None = None,
    filter_query: LogEntryQuery | None = None,
    contains: str | None = None,
    **selectors: Any,
) -> dict[str, Any]:
    """Implementation for the `get_log_summary` MCP tool."""
    start, end = _window(selectors)
    # closed bounds -> half-open bucket range
    buckets = await domain.get_summary_buckets(
        source_id,
        start,
        end + 1,
        _resolve_bucket_size(start, end, bucket_size),
        filter_query=_build_filter(filter_query, contains),
    )
    return {
        "start": start,
        "end": end,
        "buckets": [_bucket_to_dict(b) for b in buckets],
    }


async def get_log_summary_highlights_impl(
    domain: LogEntriesDomain,
    *,
    source_id: str,
    phrases: Sequence[str],
    bucket_size: int | None = None,
    filter_query: LogEntryQuery | None = None,
    **selectors: Any,
) -> dict[str, Any]:
    """Implementation for the `get_log_summary_highlights` MCP tool."""
    cleaned = [p.strip() for p in phrases]
    if not cleaned or any(not p for p in cleaned):
        raise ValueError("phrases must be a non-empty list of non-empty strings")

    start, end = _window(selectors)
    results = await domain.get_summary_highlight_buckets(
        source_id,
        start,
        end + 1,
        _resolve_bucket_size(start, end, bucket_size),
        cleaned,
        filter_query=filter_query,
    )
    return {
        "start": start,
        "end": end,
        "highlights": [
            {"phrase": p, "buckets": [_highlight_bucket_to_dict(b) for b in buckets]}
            for p, buckets in zip(cleaned, results, strict=True)
        ],
    }


async def get_log_item_impl(
    domain: LogEntriesDomain,
    *,
    source_id: str,
    item_id: str,
) -> dict[str, Any]:
    """Implementation for the `get_log_item` MCP tool."""
    configuration = await domain.sources.get_source_configuration(source_id)
    item = await domain.get_log_item(item_id, configuration)
    return _item_to_dict(item)
