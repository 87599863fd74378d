from __future__ import annotations

from mcp_log_entries_server.core.message import (
    FALLBACK_MESSAGE,
    ConstantPart,
    FieldPart,
    FormattingRule,
    compile_formatting_rules,
    get_builtin_rules,
)
from mcp_log_entries_server.core.models import ConstantSegment, FieldSegment


def test_builtin_required_fields_are_unique_and_ordered() -> None:
    compiled = compile_formatting_rules(get_builtin_rules(["message", "@message"]))
    assert compiled.required_fields == ("event.dataset", "log.original", "message", "@message")


def test_dataset_rule_wins_when_both_fields_exist() -> None:
    fmt = compile_formatting_rules(get_builtin_rules(["message"])).format
    out = fmt({"event.dataset": "nginx", "log.original": "GET /", "message": "m"}, {})
    assert out == [
        ConstantSegment("["),
        FieldSegment("event.dataset", "nginx"),
        ConstantSegment("] "),
        FieldSegment("log.original", "GET /"),
    ]


def test_message_fields_are_tried_in_configured_order() -> None:
    fmt = compile_formatting_rules(get_builtin_rules(["message", "@message"])).format
    assert fmt({"@message": "second"}, {}) == [FieldSegment("@message", "second")]
    assert fmt({"message": "first", "@message": "second"}, {}) == [
        FieldSegment("message", "first")
    ]


def test_log_original_is_last_resort() -> None:
    fmt = compile_formatting_rules(get_builtin_rules(["message"])).format
    assert fmt({"log.original": "raw"}, {}) == [FieldSegment("log.original", "raw")]


def test_no_rule_matches() -> None:
    fmt = compile_formatting_rules(get_builtin_rules(["message"])).format
    assert fmt({}, {}) == [ConstantSegment(FALLBACK_MESSAGE)]
    assert fmt({"message": None}, {}) == [ConstantSegment(FALLBACK_MESSAGE)]


def test_non_string_values_and_highlights() -> None:
    rule = FormattingRule(
        when_exists=("count",),
        parts=(ConstantPart("n="), FieldPart("count"), FieldPart("ctx")),
    )
    fmt = compile_formatting_rules([rule]).format
    out = fmt({"count": 3, "ctx": {"b": 1, "a": 2}}, {"count": ["3"]})
    assert out == [
        ConstantSegment("n="),
        FieldSegment("count", "3", ["3"]),
        FieldSegment("ctx", '{"a":2,"b":1}'),
    ]
