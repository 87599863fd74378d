from __future__ import annotations

import argparse
import asyncio
import sys

from mcp_log_entries_server.core.domain import LogEntriesDomain
from mcp_log_entries_server.core.errors import LogEntriesError
from mcp_log_entries_server.core.models import (
    AfterCursor,
    BeforeCursor,
    ConstantSegment,
    FieldColumnValue,
    LogEntry,
    MessageColumnValue,
    TimeKey,
)
from mcp_log_entries_server.core.sources import DEFAULT_SOURCE_ID, SourceConfiguration, StaticSources
from mcp_log_entries_server.core.store import FileLogStore
from mcp_log_entries_server.core.time_window import (
    from_epoch_millis,
    parse_iso_dt,
    resolve_time_range_millis,
    to_epoch_millis,
)


def _parse_key(s: str) -> TimeKey:
    """Parse TIME[:TIEBREAKER] (epoch ms)."""
    time, _, tiebreaker = s.partition(":")
    try:
        return TimeKey(int(time), int(tiebreaker or 0))
    except ValueError as e:
        raise argparse.ArgumentTypeError("key must look like TIME[:TIEBREAKER] in epoch ms") from e


def _format_entry(entry: LogEntry) -> str:
    parts: list[str] = []
    for column in entry.columns:
        if isinstance(column, MessageColumnValue):
            parts.append(
                "".join(
                    s.constant if isinstance(s, ConstantSegment) else s.value
                    for s in column.message
                )
            )
        elif isinstance(column, FieldColumnValue):
            parts.append(f"{column.field}={column.value}")
        else:
            parts.append(from_epoch_millis(column.timestamp).isoformat())
    return f"{entry.cursor.time}:{entry.cursor.tiebreaker} " + " ".join(parts)


def _window(args: argparse.Namespace) -> tuple[int, int]:
    return resolve_time_range_millis(
        since=args.since,
        until=args.until,
        date_=args.date,
        hour=args.hour,
        days_lookback=args.days,
        hours_lookback=args.hours,
    )


async def _run(args: argparse.Namespace) -> list[str]:
    sources = StaticSources({DEFAULT_SOURCE_ID: SourceConfiguration(log_paths=args.log_paths)})
    domain = LogEntriesDomain(FileLogStore(), sources)
    start, end = _window(args)

    if args.command == "page":
        if args.before is not None:
            cursor = BeforeCursor(before=args.before)
        elif args.after is not None:
            cursor = AfterCursor(after=args.after)
        else:
            cursor = None
        entries = await domain.get_entries(
            DEFAULT_SOURCE_ID,
            start_date=start,
            end_date=end,
            cursor=cursor,
            size=args.size,
            highlight_term=args.highlight,
        )
        return [_format_entry(e) for e in entries]

    if args.command == "around":
        center = TimeKey(to_epoch_millis(parse_iso_dt(args.center)))
        entries = await domain.get_entries_around(
            DEFAULT_SOURCE_ID,
            center,
            start_date=start,
            end_date=end,
            size=args.size,
            highlight_term=args.highlight,
        )
        return [_format_entry(e) for e in entries]

    buckets = await domain.get_summary_buckets(
        DEFAULT_SOURCE_ID, start, end + 1, args.bucket_seconds * 1000
    )
    return [
        f"{from_epoch_millis(b.start).isoformat()} {b.entries_count}"
        for b in buckets
        if b.entries_count or args.include_empty
    ]


def main() -> None:
    p = argparse.ArgumentParser(description="Page through, window and summarize log files.")
    p.add_argument("--since", default=None, help="ISO8601 start time (assumes UTC if tz missing)")
    p.add_argument("--until", default=None, help="ISO8601 end time (assumes UTC if tz missing)")
    p.add_argument("--date", default=None, help="YYYY-MM-DD (UTC day)")
    p.add_argument("--hour", default=None, help="YYYY-MM-DDTHH (UTC hour)")
    p.add_argument("--days", type=int, default=None, help="Look back N days")
    p.add_argument("--hours", type=int, default=None, help="Look back N hours (default: 24)")

    sub = p.add_subparsers(dest="command", required=True)

    page = sub.add_parser("page", help="Print one page of entries")
    page.add_argument("log_paths", nargs="+")
    page.add_argument("--size", type=int, default=None)
    page.add_argument("--highlight", default=None)
    direction = page.add_mutually_exclusive_group()
    direction.add_argument("--before", type=_parse_key, default=None, help="TIME[:TIEBREAKER]")
    direction.add_argument("--after", type=_parse_key, default=None, help="TIME[:TIEBREAKER]")

    around = sub.add_parser("around", help="Print entries around a point in time")
    around.add_argument("log_paths", nargs="+")
    around.add_argument("--center", required=True, help="ISO8601 center time")
    around.add_argument("--size", type=int, default=None)
    around.add_argument("--highlight", default=None)

    summary = sub.add_parser("summary", help="Print entry counts per time bucket")
    summary.add_argument("log_paths", nargs="+")
    summary.add_argument("--bucket-seconds", type=int, default=60)
    summary.add_argument("--include-empty", action="store_true")

    args = p.parse_args()

    try:
        lines = asyncio.run(_run(args))
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except (LogEntriesError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    for line in lines:
        print(line)

    if args.command != "summary":
        print(f"\nFound {len(lines)} entries.")


if __name__ == "__main__":
    main()
