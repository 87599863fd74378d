"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: paging, windowing, highlight and summary queries over log sources
- Resources: addressable data blobs (source list, schemas, a sample log)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_log_entries_server.server.log_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_log_entries_server.core.config import resolve_log_entries_config
from mcp_log_entries_server.core.domain import LogEntriesDomain
from mcp_log_entries_server.core.sources import DEFAULT_SOURCE_ID, sources_from_env
from mcp_log_entries_server.core.store import FileLogStore
from mcp_log_entries_server.prompts.registry import register_prompts
from mcp_log_entries_server.resources.registry import register_resources
from mcp_log_entries_server.tools.entries import (
    get_log_entries_around_impl,
    get_log_entries_between_impl,
    get_log_entries_impl,
    get_log_entry_highlights_impl,
    get_log_item_impl,
    get_log_summary_highlights_impl,
    get_log_summary_impl,
)

LOGGER = logging.getLogger(__name__)
LOG_LEVEL_ENV = "LOG_ENTRIES_LOG_LEVEL"

_domain: LogEntriesDomain | None = None


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; stdout carries the protocol.
    """
    level_name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_domain() -> LogEntriesDomain:
    """Return the process-wide domain, building it from the environment once."""
    global _domain
    if _domain is None:
        config = resolve_log_entries_config()
        _domain = LogEntriesDomain(
            FileLogStore(top_entries_per_bucket=config.top_entries_per_bucket),
            sources_from_env(),
            config,
        )
    return _domain


mcp = FastMCP("log-entries", json_response=True)

register_resources(mcp, get_domain)
register_prompts(mcp)


@mcp.tool()
async def get_log_entries(
    source_id: str = DEFAULT_SOURCE_ID,
    before: dict[str, int] | str | None = None,
    after: dict[str, int] | str | None = None,
    size: int | None = None,
    since: str | None = None,
    until: str | None = None,
    date: str | None = None,
    hour: str | None = None,
    week: str | None = None,
    month: str | None = None,
    year: str | None = None,
    days_lookback: int | None = None,
    hours_lookback: int | None = None,
    contains: str | None = None,
    highlight: str | None = None,
    filter_query: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return one ascending page of rendered log entries.

    Parameters
    ----------
    source_id:
        Configured log source (see app://log-entries/sources).
    before/after:
        Cursor. A key {"time": <epoch ms>, "tiebreaker": <int>} returned as
        top_cursor/bottom_cursor by a previous call, or the sentinels
        "last" (for before) and "first" (for after). Omit both for the
        first page.
    size:
        Page size. Defaults to LOG_ENTRIES_PAGE_SIZE (200).
    since/until:
        ISO-8601 datetimes. If timezone is omitted, UTC is assumed.
    date/hour/week/month/year:
        Convenience selectors, e.g. 2025-12-31, 2025-12-31T20, 2025-W52,
        2025-12, 2025.
    days_lookback/hours_lookback:
        Relative window ending now. Defaults to the last 24 hours when no
        selector is given.
    contains:
        Phrase that must appear in some field.
    highlight:
        Phrase to highlight in the rendered columns.
    filter_query:
        Optional query DSL object (bool, multi_match, match_phrase, term,
        terms, exists, range).

    Returns
    -------
    dict:
        {"count": int, "entries": list[dict], "top_cursor": dict, "bottom_cursor": dict}
    """
    return await get_log_entries_impl(
        get_domain(),
        source_id=source_id,
        before=before,
        after=after,
        size=size,
        filter_query=filter_query,
        contains=contains,
        highlight=highlight,
        since=since,
        until=until,
        date_=date,
        hour=hour,
        week=week,
        month=month,
        year=year,
        days_lookback=days_lookback,
        hours_lookback=hours_lookback,
    )


@mcp.tool()
async def get_log_entries_around(
    source_id: str = DEFAULT_SOURCE_ID,
    center: dict[str, int] | None = None,
    center_time: str | None = None,
    size: int | None = None,
    since: str | None = None,
    until: str | None = None,
    date: str | None = None,
    hour: str | None = None,
    days_lookback: int | None = None,
    hours_lookback: int | None = None,
    contains: str | None = None,
    highlight: str | None = None,
    filter_query: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return a window of entries centered on a key or a point in time.

    ``size // 2`` entries precede the center and the rest start at the
    center (or its nearest successor), all in ascending order.
    Pass either ``center`` ({"time", "tiebreaker"}) or ``center_time``
    (ISO-8601).
    """
    return await get_log_entries_around_impl(
        get_domain(),
        source_id=source_id,
        center=center,
        center_time=center_time,
        size=size,
        filter_query=filter_query,
        contains=contains,
        highlight=highlight,
        since=since,
        until=until,
        date_=date,
        hour=hour,
        days_lookback=days_lookback,
        hours_lookback=hours_lookback,
    )


@mcp.tool()
async def get_log_entries_between(
    start_key: dict[str, int],
    end_key: dict[str, int],
    source_id: str = DEFAULT_SOURCE_ID,
    contains: str | None = None,
    filter_query: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return every entry whose key lies in [start_key, end_key], ascending."""
    return await get_log_entries_between_impl(
        get_domain(),
        source_id=source_id,
        start_key=start_key,
        end_key=end_key,
        filter_query=filter_query,
        contains=contains,
    )


@mcp.tool()
async def get_log_entry_highlights(
    start_key: dict[str, int],
    end_key: dict[str, int],
    highlights: list[dict[str, Any]],
    source_id: str = DEFAULT_SOURCE_ID,
    filter_query: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return, per phrase, the matching entries around and inside a key range.

    Parameters
    ----------
    highlights:
        List of {"query": str, "count_before": int, "count_after": int}.
        Up to count_before matches before start_key and count_after after
        end_key are included along with every match inside the range.

    Returns
    -------
    dict:
        {"highlights": [{"query": str, "count": int, "entries": [...]}, ...]}
        in the order of the request.
    """
    return await get_log_entry_highlights_impl(
        get_domain(),
        source_id=source_id,
        start_key=start_key,
        end_key=end_key,
        highlights=highlights,
        filter_query=filter_query,
    )


@mcp.tool()
async def get_log_summary(
    source_id: str = DEFAULT_SOURCE_ID,
    bucket_size: int | None = None,
    since: str | None = None,
    until: str | None = None,
    date: str | None = None,
    hour: str | None = None,
    week: str | None = None,
    month: str | None = None,
    days_lookback: int | None = None,
    hours_lookback: int | None = None,
    contains: str | None = None,
    filter_query: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return entry counts per fixed-width time bucket.

    ``bucket_size`` is in milliseconds; by default the window is split
    into about 60 buckets.
    """
    return await get_log_summary_impl(
        get_domain(),
        source_id=source_id,
        bucket_size=bucket_size,
        filter_query=filter_query,
        contains=contains,
        since=since,
        until=until,
        date_=date,
        hour=hour,
        week=week,
        month=month,
        days_lookback=days_lookback,
        hours_lookback=hours_lookback,
    )


@mcp.tool()
async def get_log_summary_highlights(
    phrases: list[str],
    source_id: str = DEFAULT_SOURCE_ID,
    bucket_size: int | None = None,
    since: str | None = None,
    until: str | None = None,
    date: str | None = None,
    hour: str | None = None,
    days_lookback: int | None = None,
    hours_lookback: int | None = None,
    filter_query: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return, per phrase, the non-empty buckets with one representative key each."""
    return await get_log_summary_highlights_impl(
        get_domain(),
        source_id=source_id,
        phrases=phrases,
        bucket_size=bucket_size,
        filter_query=filter_query,
        since=since,
        until=until,
        date_=date,
        hour=hour,
        days_lookback=days_lookback,
        hours_lookback=hours_lookback,
    )


@mcp.tool()
async def get_log_item(item_id: str, source_id: str = DEFAULT_SOURCE_ID) -> dict[str, Any]:
    """Return every field of one log entry, sorted by field name.

    ``item_id`` is an entry id as returned by the other tools
    (``<log file path>:<line number>``).
    """
    return await get_log_item_impl(get_domain(), source_id=source_id, item_id=item_id)


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
