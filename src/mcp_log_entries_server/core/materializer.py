"""Render stored documents into column-structured log entries."""

from __future__ import annotations

from collections.abc import Sequence
from typing import assert_never

from .message import MessageFormatter
from .models import (
    FieldColumnValue,
    LogColumnValue,
    LogEntry,
    LogEntryDocument,
    MessageColumnValue,
    TimestampColumnValue,
)
from .sources import FieldColumn, LogColumnConfig, MessageColumn, TimestampColumn
from .typed_json import stable_stringify


def _render_column(
    column: LogColumnConfig,
    document: LogEntryDocument,
    format_message: MessageFormatter,
) -> LogColumnValue:
    if isinstance(column, TimestampColumn):
        return TimestampColumnValue(column_id=column.id, timestamp=document.key.time)
    if isinstance(column, MessageColumn):
        return MessageColumnValue(
            column_id=column.id,
            message=format_message(document.fields, document.highlights),
        )
    if isinstance(column, FieldColumn):
        return FieldColumnValue(
            column_id=column.id,
            field=column.field,
            value=stable_stringify(document.fields.get(column.field)),
            highlights=list(document.highlights.get(column.field, [])),
        )
    assert_never(column)


def materialize(
    document: LogEntryDocument,
    columns: Sequence[LogColumnConfig],
    format_message: MessageFormatter,
) -> LogEntry:
    """Render one document; one output column per schema column, in order."""
    return LogEntry(
        id=document.gid,
        cursor=document.key,
        columns=[_render_column(c, document, format_message) for c in columns],
    )


def materialize_all(
    documents: Sequence[LogEntryDocument],
    columns: Sequence[LogColumnConfig],
    format_message: MessageFormatter,
) -> list[LogEntry]:
    return [materialize(d, columns, format_message) for d in documents]
