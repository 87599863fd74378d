"""Conversion of raw stored documents into log item field lists."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .models import LogEntriesItem, LogItemField, LogItemHit, TimeKey
from .typed_json import flatten_object, stable_stringify


def _field_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return stable_stringify(value)


def convert_document_source_to_fields(source: Mapping[str, Any]) -> list[LogItemField]:
    """Flatten a document source into dotted field/value pairs."""
    return [
        LogItemField(field=name, value=_field_value(value))
        for name, value in flatten_object(source).items()
    ]


def convert_hit_to_item(hit: LogItemHit) -> LogEntriesItem:
    defaults = [
        LogItemField(field="_index", value=hit.index),
        LogItemField(field="_id", value=hit.id),
    ]
    fields = sorted(
        [*defaults, *convert_document_source_to_fields(hit.source)],
        key=lambda f: f.field,
    )
    return LogEntriesItem(
        id=hit.id,
        index=hit.index,
        key=TimeKey(time=hit.sort[0], tiebreaker=hit.sort[1]),
        fields=fields,
    )
