"""Bracketed timestamp parser."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

from .base import ParsedLine
from .kv import LEVEL_FIELD, MESSAGE_FIELD, normalize_level, parse_iso_timestamp


@dataclass(frozen=True, slots=True)
class BracketTimestampParser:
    """Parse '<timestamp> [LEVEL] <message>' lines."""

    timestamp_formats: Sequence[str] = ("%Y-%m-%d %H:%M:%S",)

    _re = re.compile(r"^(?P<ts>.+?)\s+\[(?P<level>[A-Za-z]+)\]\s+(?P<msg>.*)$")

    def _parse_ts(self, ts_str: str) -> datetime | None:
        """Parse a timestamp string using the configured formats, then ISO8601."""
        for fmt in self.timestamp_formats:
            try:
                return datetime.strptime(ts_str, fmt).replace(tzinfo=UTC)
            except ValueError:
                continue
        return parse_iso_timestamp(ts_str)

    def parse(self, line: str) -> ParsedLine | None:
        """Parse a bracketed timestamp line into fields."""
        m = self._re.match(line)
        if not m:
            return None

        ts = self._parse_ts(m.group("ts").strip())
        if ts is None:
            return None

        fields = {MESSAGE_FIELD: m.group("msg").strip()}
        level = normalize_level(m.group("level"))
        if level is not None:
            fields[LEVEL_FIELD] = level
        return ParsedLine(timestamp=ts, fields=fields)
