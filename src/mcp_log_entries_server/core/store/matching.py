"""In-memory evaluation of the query subset used by the file store.

Supported clauses: match_all, bool (must/filter/should/must_not),
multi_match, match_phrase, match, term, terms, exists and range. Text
clauses match case-insensitive substrings; there is no scoring.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from ..errors import UnsupportedQuery
from ..typed_json import LogEntryQuery

_WS_RE = re.compile(r"\s+")


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return " ".join(str(v) for v in value)
    return str(value)


def _phrase_in(phrase: str, value: Any) -> bool:
    text = _text(value)
    if text is None:
        return False
    return phrase.casefold() in text.casefold()


def _single_field_clause(clause: Mapping[str, Any], name: str) -> tuple[str, Any]:
    if len(clause) != 1:
        raise UnsupportedQuery(f"{name} expects exactly one field")
    ((field, body),) = clause.items()
    return field, body


def _query_text(body: Any) -> str:
    if isinstance(body, Mapping):
        body = body.get("query")
    if not isinstance(body, str):
        raise UnsupportedQuery("text queries must be strings")
    return body


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


class QueryMatcher:
    """Evaluates queries against flat field maps.

    ``timestamp_field`` range clauses compare against the document time in
    epoch milliseconds rather than the stored field value.
    """

    def __init__(self, timestamp_field: str) -> None:
        self.timestamp_field = timestamp_field

    def matches(self, query: LogEntryQuery | None, fields: Mapping[str, Any], time: int) -> bool:
        if not query:
            return True
        if len(query) != 1:
            raise UnsupportedQuery(f"expected a single clause, got {sorted(query)}")
        ((kind, clause),) = query.items()

        if kind == "match_all":
            return True
        if kind == "bool":
            return self._bool(clause, fields, time)
        if kind == "multi_match":
            phrase = _query_text(clause)
            return any(_phrase_in(phrase, fields.get(f)) for f in self._field_names(clause, fields))
        if kind == "match_phrase":
            field, body = _single_field_clause(clause, kind)
            return _phrase_in(_query_text(body), fields.get(field))
        if kind == "match":
            field, body = _single_field_clause(clause, kind)
            terms = _WS_RE.split(_query_text(body).strip())
            return all(_phrase_in(t, fields.get(field)) for t in terms if t)
        if kind == "term":
            field, body = _single_field_clause(clause, kind)
            expected = body.get("value") if isinstance(body, Mapping) else body
            return expected in _as_list(fields.get(field))
        if kind == "terms":
            field, values = _single_field_clause(clause, kind)
            present = _as_list(fields.get(field))
            return any(v in present for v in _as_list(values))
        if kind == "exists":
            return fields.get(clause.get("field")) is not None
        if kind == "range":
            field, bounds = _single_field_clause(clause, kind)
            value = time if field == self.timestamp_field else fields.get(field)
            return _in_range(value, bounds)

        raise UnsupportedQuery(f"unsupported query clause: {kind}")

    def _bool(self, clause: Mapping[str, Any], fields: Mapping[str, Any], time: int) -> bool:
        required = _as_list(clause.get("must")) + _as_list(clause.get("filter"))
        if not all(self.matches(q, fields, time) for q in required):
            return False
        if any(self.matches(q, fields, time) for q in _as_list(clause.get("must_not"))):
            return False
        should = _as_list(clause.get("should"))
        if should and not required:
            return any(self.matches(q, fields, time) for q in should)
        return True

    def _field_names(self, clause: Mapping[str, Any], fields: Mapping[str, Any]) -> Sequence[str]:
        names = clause.get("fields") or ["*"]
        if "*" in names:
            return list(fields)
        return names

    def phrases(self, query: LogEntryQuery | None) -> list[str]:
        """Text phrases of a highlight query, in clause order."""
        if not query:
            return []
        out: list[str] = []
        for kind, clause in query.items():
            if kind == "multi_match":
                out.append(_query_text(clause))
            elif kind == "match_phrase":
                out.append(_query_text(_single_field_clause(clause, kind)[1]))
            elif kind == "bool":
                for occur in ("must", "filter", "should"):
                    for sub in _as_list(clause.get(occur)):
                        out.extend(self.phrases(sub))
        return out

    def highlights(
        self,
        query: LogEntryQuery | None,
        fields: Mapping[str, Any],
        requested: Sequence[str],
    ) -> dict[str, list[str]]:
        """Every occurrence of each highlight phrase, per requested string field."""
        phrases = [p for p in self.phrases(query) if p]
        if not phrases:
            return {}
        out: dict[str, list[str]] = {}
        for name in requested:
            value = fields.get(name)
            if not isinstance(value, str):
                continue
            spans: list[str] = []
            for phrase in phrases:
                spans.extend(
                    m.group(0) for m in re.finditer(re.escape(phrase), value, flags=re.IGNORECASE)
                )
            if spans:
                out[name] = spans
        return out


def _in_range(value: Any, bounds: Mapping[str, Any]) -> bool:
    if value is None:
        return False
    try:
        if "gt" in bounds and not value > bounds["gt"]:
            return False
        if "gte" in bounds and not value >= bounds["gte"]:
            return False
        if "lt" in bounds and not value < bounds["lt"]:
            return False
        if "lte" in bounds and not value <= bounds["lte"]:
            return False
    except TypeError:
        # mismatched types never match
        return False
    return True
