"""Core data models for log entry pagination and summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Union


class Direction(str, Enum):
    """Traversal direction of an adjacency query."""

    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass(frozen=True, slots=True, order=True)
class TimeKey:
    """Sort key of a log entry: epoch millis plus a tiebreaker."""

    time: int
    tiebreaker: int = 0


Fields = dict[str, Any]
Highlights = dict[str, list[str]]


@dataclass(frozen=True, slots=True)
class LogEntryDocument:
    """Matched document as returned by a store adapter."""

    fields: Fields
    highlights: Highlights
    gid: str
    key: TimeKey


@dataclass(frozen=True, slots=True)
class BeforeCursor:
    before: TimeKey | Literal["last"]


@dataclass(frozen=True, slots=True)
class AfterCursor:
    after: TimeKey | Literal["first"]


Cursor = Union[BeforeCursor, AfterCursor]


@dataclass(frozen=True, slots=True)
class LogSummaryBucket:
    """Entry count and a few representative keys for a time interval."""

    start: int
    end: int
    entries_count: int
    top_entry_keys: tuple[TimeKey, ...] = ()


@dataclass(frozen=True, slots=True)
class LogSummaryHighlightBucket:
    start: int
    end: int
    entries_count: int
    representative_key: TimeKey


@dataclass(frozen=True, slots=True)
class FieldSegment:
    field: str
    value: str
    highlights: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ConstantSegment:
    constant: str


MessageSegment = Union[FieldSegment, ConstantSegment]


@dataclass(frozen=True, slots=True)
class TimestampColumnValue:
    column_id: str
    timestamp: int


@dataclass(frozen=True, slots=True)
class MessageColumnValue:
    column_id: str
    message: list[MessageSegment]


@dataclass(frozen=True, slots=True)
class FieldColumnValue:
    column_id: str
    field: str
    value: str  # stable JSON encoding of the field value
    highlights: list[str] = field(default_factory=list)


LogColumnValue = Union[TimestampColumnValue, MessageColumnValue, FieldColumnValue]


@dataclass(frozen=True, slots=True)
class LogEntry:
    """Column-structured entry ready for display."""

    id: str
    cursor: TimeKey
    columns: list[LogColumnValue]


@dataclass(frozen=True, slots=True)
class EntriesAround:
    """Before/after halves of a window around a center key."""

    entries_before: list[LogEntry]
    entries_after: list[LogEntry]


@dataclass(frozen=True, slots=True)
class HighlightRequest:
    query: str
    count_before: int = 0
    count_after: int = 0


@dataclass(frozen=True, slots=True)
class LogItemHit:
    """Raw stored document looked up by id."""

    index: str
    id: str
    source: dict[str, Any]
    sort: tuple[int, int]


@dataclass(frozen=True, slots=True)
class LogItemField:
    field: str
    value: str


@dataclass(frozen=True, slots=True)
class LogEntriesItem:
    id: str
    index: str
    key: TimeKey
    fields: list[LogItemField]
