"""Log line formats.

Parsers turn JSON lines, logfmt and bracketed-timestamp lines into
document fields.
"""

from __future__ import annotations

from .base import LineParser, ParsedLine
from .bracket import BracketTimestampParser
from .composite import CompositeParser
from .jsonl import JsonLinesParser
from .logfmt import LogfmtParser


def default_parser() -> LineParser:
    """Default parser chain (first match wins)."""
    return CompositeParser(
        parsers=[
            BracketTimestampParser(
                timestamp_formats=(
                    "%Y-%m-%d %H:%M:%S",
                    "%Y-%m-%dT%H:%M:%S",
                    "%Y-%m-%dT%H:%M:%SZ",
                    "%Y/%m/%d %H:%M:%S",
                    "%d-%m-%Y %H:%M:%S",
                )
            ),
            JsonLinesParser(),
            LogfmtParser(),
        ]
    )


__all__ = [
    "BracketTimestampParser",
    "CompositeParser",
    "JsonLinesParser",
    "LineParser",
    "LogfmtParser",
    "ParsedLine",
    "default_parser",
]
