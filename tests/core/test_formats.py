from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from mcp_log_entries_server.core.formats import (
    BracketTimestampParser,
    CompositeParser,
    JsonLinesParser,
    LogfmtParser,
    ParsedLine,
    default_parser,
)
from mcp_log_entries_server.core.formats.kv import normalize_fields, normalize_level


def test_bracket_timestamp_parser() -> None:
    parser = BracketTimestampParser()
    parsed = parser.parse("2025-12-30 08:12:04 [ERROR] boom")
    assert parsed is not None
    assert parsed.timestamp == datetime(2025, 12, 30, 8, 12, 4, tzinfo=UTC)
    assert parsed.fields == {"message": "boom", "log.level": "error"}


def test_bracket_parser_falls_back_to_iso() -> None:
    parser = BracketTimestampParser()
    parsed = parser.parse("2025-12-30T08:12:04+02:00 [WARN] slow")
    assert parsed is not None
    assert parsed.timestamp == datetime(2025, 12, 30, 6, 12, 4, tzinfo=UTC)
    assert parsed.fields["log.level"] == "warning"


def test_bracket_parser_rejects_bad_timestamp() -> None:
    assert BracketTimestampParser().parse("yesterday [INFO] hi") is None
    assert BracketTimestampParser().parse("no brackets here") is None


def test_json_lines_parser_flattens_and_normalizes() -> None:
    parser = JsonLinesParser()
    line = (
        '{"timestamp":"2025-12-30T08:12:04Z","level":"error","msg":"boom",'
        '"event":{"dataset":"api"},"tags":["a"]}'
    )
    parsed = parser.parse(line)
    assert parsed is not None
    assert parsed.timestamp == datetime(2025, 12, 30, 8, 12, 4, tzinfo=UTC)
    assert parsed.fields == {
        "log.level": "error",
        "message": "boom",
        "event.dataset": "api",
        "tags": ["a"],
    }


def test_json_lines_parser_without_timestamp() -> None:
    parsed = JsonLinesParser().parse('{"message":"boom"}')
    assert parsed is not None
    assert parsed.timestamp is None


def test_json_lines_parser_rejects_non_objects() -> None:
    parser = JsonLinesParser()
    assert parser.parse("[1, 2]") is None
    assert parser.parse("{not json}") is None


def test_logfmt_parser() -> None:
    parser = LogfmtParser()
    line = 'time=2025-12-30T08:12:04Z level=error msg="boom happened" user=42'
    parsed = parser.parse(line)
    assert parsed is not None
    assert parsed.timestamp == datetime(2025, 12, 30, 8, 12, 4, tzinfo=UTC)
    assert parsed.fields == {"log.level": "error", "message": "boom happened", "user": "42"}


def test_logfmt_parser_defaults_message_to_line() -> None:
    parsed = LogfmtParser().parse("ts=2025-12-30T08:12:04Z route=/x")
    assert parsed is not None
    assert parsed.fields["message"] == "ts=2025-12-30T08:12:04Z route=/x"


def test_logfmt_parser_uses_bare_words_as_message() -> None:
    parsed = LogfmtParser().parse("level=info starting server port=8080")
    assert parsed is not None
    assert parsed.timestamp is None
    assert parsed.fields == {"log.level": "info", "message": "starting server", "port": "8080"}


def test_logfmt_parser_rejects_plain_text() -> None:
    assert LogfmtParser().parse("just words") is None
    assert LogfmtParser().parse('unbalanced "quote') is None


def test_normalize_level_aliases() -> None:
    assert normalize_level("WARN") == "warning"
    assert normalize_level("fatal") == "critical"
    assert normalize_level("Info") == "info"
    assert normalize_level("  ") is None


def test_normalize_fields_keeps_unparseable_timestamp() -> None:
    parsed = normalize_fields({"time": "soon", "message": "x"})
    assert parsed.timestamp is None
    assert parsed.fields == {"time": "soon", "message": "x"}


def test_composite_parser_first_match_wins() -> None:
    parser = CompositeParser(parsers=[JsonLinesParser(), LogfmtParser()])
    parsed = parser.parse('{"level":"error","message":"boom","timestamp":"2025-12-30T08:12:04Z"}')
    assert parsed is not None
    assert parsed.fields == {"log.level": "error", "message": "boom"}
    assert parser.parse("nothing to see") is None


@dataclass(frozen=True)
class _Fixed:
    result: ParsedLine | None

    def parse(self, line: str) -> ParsedLine | None:
        return self.result


def test_composite_parser_prefers_timestamped_parse() -> None:
    untimed = ParsedLine(timestamp=None, fields={"message": "a"})
    timed = ParsedLine(timestamp=datetime(2025, 1, 1, tzinfo=UTC), fields={"message": "b"})

    assert CompositeParser([_Fixed(None), _Fixed(untimed), _Fixed(timed)]).parse("x") is timed
    assert CompositeParser([_Fixed(untimed), _Fixed(None)]).parse("x") is untimed


def test_default_parser_handles_common_shapes() -> None:
    parser = default_parser()
    for line in [
        "2025-12-30 08:12:04 [INFO] a",
        "2025/12/30 08:12:04 [INFO] a",
        '{"@timestamp":"2025-12-30T08:12:04Z","message":"a"}',
        "time=2025-12-30T08:12:04Z msg=a",
    ]:
        parsed = parser.parse(line)
        assert parsed is not None, line
        assert parsed.timestamp == datetime(2025, 12, 30, 8, 12, 4, tzinfo=UTC)
        assert parsed.fields["message"] == "a"
