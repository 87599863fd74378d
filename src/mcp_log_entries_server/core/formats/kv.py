"""Helpers for key-value log formats."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from .base import ParsedLine

_LEVEL_ALIASES = {
    "WARN": "warning",
    "ERR": "error",
    "FATAL": "critical",
    "CRIT": "critical",
    "SEVERE": "critical",
}

TIME_KEYS: Sequence[str] = ("@timestamp", "timestamp", "time", "ts")
LEVEL_KEYS: Sequence[str] = ("log.level", "level", "severity", "lvl", "log_level")
MESSAGE_KEYS: Sequence[str] = ("message", "msg", "error", "detail")

TIMESTAMP_FIELD = "@timestamp"
LEVEL_FIELD = "log.level"
MESSAGE_FIELD = "message"


def parse_iso_timestamp(value: str) -> datetime | None:
    """Parse an ISO8601 timestamp string; naive values are taken as UTC."""
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None

    if ts.tzinfo is None:
        return ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


def normalize_level(value: str) -> str | None:
    """Lowercase a level name, folding common aliases."""
    name = value.strip().upper()
    if not name:
        return None
    return _LEVEL_ALIASES.get(name, name.lower())


def normalize_fields(
    fields: Mapping[str, Any],
    *,
    time_keys: Sequence[str] = TIME_KEYS,
    level_keys: Sequence[str] = LEVEL_KEYS,
    message_keys: Sequence[str] = MESSAGE_KEYS,
) -> ParsedLine:
    """Move timestamp, level and message into their canonical field names.

    Keys are matched case-insensitively; unmatched keys are kept as-is.
    """
    out = dict(fields)
    lower = {k.lower(): k for k in fields}

    ts: datetime | None = None
    for key in time_keys:
        original = lower.get(key)
        if original is not None and isinstance(fields[original], str):
            ts = parse_iso_timestamp(fields[original])
            if ts is not None:
                out.pop(original)
                break

    for key in level_keys:
        original = lower.get(key)
        if original is not None and isinstance(fields[original], str):
            level = normalize_level(fields[original])
            if level is not None:
                out.pop(original)
                out[LEVEL_FIELD] = level
                break

    for key in message_keys:
        original = lower.get(key)
        if original is not None and isinstance(fields[original], str) and fields[original]:
            out[MESSAGE_FIELD] = out.pop(original)
            break

    return ParsedLine(timestamp=ts, fields=out)
