"""JSON helpers shared by the materializer, formats and the store."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

JsonObject = dict[str, Any]
LogEntryQuery = JsonObject


def stable_stringify(value: Any) -> str:
    """Encode a value as JSON with sorted keys and compact separators."""
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def flatten_object(obj: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into dotted keys. Lists are kept as values."""
    out: dict[str, Any] = {}
    for key, value in obj.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping) and value:
            out.update(flatten_object(value, path))
        else:
            out[path] = value
    return out
