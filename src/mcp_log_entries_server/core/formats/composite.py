"""Parser composition utilities."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .base import LineParser, ParsedLine


@dataclass(frozen=True, slots=True)
class CompositeParser:
    """Try parsers in order.

    The first parse carrying a timestamp wins. When no parser finds one,
    the first untimestamped parse is returned instead.
    """

    parsers: Sequence[LineParser]

    def parse(self, line: str) -> ParsedLine | None:
        fallback: ParsedLine | None = None
        for p in self.parsers:
            out = p.parse(line)
            if out is None:
                continue
            if out.timestamp is not None:
                return out
            if fallback is None:
                fallback = out
        return fallback
