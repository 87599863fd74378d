from __future__ import annotations

from mcp_log_entries_server.core.log_item import (
    convert_document_source_to_fields,
    convert_hit_to_item,
)
from mcp_log_entries_server.core.models import LogItemHit, TimeKey
from mcp_log_entries_server.core.typed_json import flatten_object


def test_flatten_object() -> None:
    assert flatten_object({"a": {"b": {"c": 1}, "d": [1, {"x": 2}]}, "e": {}}) == {
        "a.b.c": 1,
        "a.d": [1, {"x": 2}],
        "e": {},
    }


def test_source_values_are_strings() -> None:
    fields = convert_document_source_to_fields(
        {"message": "hi", "http": {"status": 504}, "tags": ["a", "b"], "gone": None}
    )
    assert {(f.field, f.value) for f in fields} == {
        ("message", "hi"),
        ("http.status", "504"),
        ("tags", '["a","b"]'),
        ("gone", "null"),
    }


def test_hit_to_item_sorts_fields_and_adds_metadata() -> None:
    hit = LogItemHit(
        index="app.log",
        id="app.log:3",
        source={"message": "boom", "@timestamp": "2025-12-30T08:00:00+00:00"},
        sort=(1767081600000, 3),
    )
    item = convert_hit_to_item(hit)

    assert item.id == "app.log:3"
    assert item.index == "app.log"
    assert item.key == TimeKey(1767081600000, 3)
    assert [f.field for f in item.fields] == ["@timestamp", "_id", "_index", "message"]
