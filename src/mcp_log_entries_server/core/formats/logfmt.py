"""Logfmt parser."""

from __future__ import annotations

import shlex
from dataclasses import dataclass

from .base import ParsedLine
from .kv import MESSAGE_FIELD, normalize_fields


def split_logfmt(line: str) -> tuple[dict[str, str], list[str]]:
    """Split a logfmt line into key=value pairs and bare words.

    Raises ValueError on unbalanced quotes.
    """
    pairs: dict[str, str] = {}
    words: list[str] = []
    for token in shlex.split(line, posix=True):
        key, sep, value = token.partition("=")
        if sep and key:
            pairs[key] = value
        else:
            words.append(token)
    return pairs, words


@dataclass(frozen=True, slots=True)
class LogfmtParser:
    """Parse logfmt key=value lines.

    Without a msg/message key, bare words become the message, and the
    whole line is used when there are none.
    """

    def parse(self, line: str) -> ParsedLine | None:
        try:
            pairs, words = split_logfmt(line)
        except ValueError:
            return None
        if not pairs:
            return None

        parsed = normalize_fields(pairs)
        parsed.fields.setdefault(MESSAGE_FIELD, " ".join(words) or line.strip())
        return parsed
