"""JSON-lines parser."""

from __future__ import annotations

import json
from dataclasses import dataclass

from ..typed_json import flatten_object
from .base import ParsedLine
from .kv import normalize_fields


@dataclass(frozen=True, slots=True)
class JsonLinesParser:
    """Parse JSON-lines logs (one JSON object per line).

    Nested objects are flattened to dotted field names, so
    ``{"log": {"level": "info"}}`` yields ``log.level``.
    """

    def parse(self, line: str) -> ParsedLine | None:
        """Parse a JSON object line into fields."""
        s = line.strip()
        if not s or not (s.startswith("{") and s.endswith("}")):
            return None

        try:
            obj = json.loads(s)
        except json.JSONDecodeError:
            return None
        if not isinstance(obj, dict):
            return None

        return normalize_fields(flatten_object(obj))
