"""Parser interface for turning log lines into document fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class ParsedLine:
    """Fields extracted from one line plus its timestamp, if any."""

    timestamp: datetime | None
    fields: dict[str, Any] = field(default_factory=dict)


class LineParser(Protocol):
    """Parser interface: return ParsedLine if line matches, else None."""

    def parse(self, line: str) -> ParsedLine | None:
        """Parse a log line into fields if recognized."""
        ...
