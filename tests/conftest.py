from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from mcp_log_entries_server.core.errors import LogItemNotFound
from mcp_log_entries_server.core.models import (
    Direction,
    LogEntryDocument,
    LogItemHit,
    LogSummaryBucket,
    TimeKey,
)
from mcp_log_entries_server.core.sources import SourceConfiguration, StaticSources


@dataclass
class RecordingAdapter:
    """In-memory store adapter that records every call.

    Filter queries are recorded but not evaluated.
    """

    documents: list[LogEntryDocument] = field(default_factory=list)
    buckets: list[LogSummaryBucket] = field(default_factory=list)
    fail_with: BaseException | None = None
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def _ordered(self) -> list[LogEntryDocument]:
        return sorted(self.documents, key=lambda d: d.key)

    async def fetch_adjacent(
        self,
        source: SourceConfiguration,
        fields: Sequence[str],
        anchor: TimeKey,
        direction: Direction,
        max_count: int,
        filter_query=None,
        highlight_query=None,
    ) -> list[LogEntryDocument]:
        self.calls.append(
            (
                "fetch_adjacent",
                {
                    "anchor": anchor,
                    "direction": direction,
                    "max_count": max_count,
                    "filter_query": filter_query,
                    "highlight_query": highlight_query,
                },
            )
        )
        if self.fail_with is not None:
            raise self.fail_with
        if direction is Direction.FORWARD:
            candidates = [d for d in self._ordered() if d.key > anchor]
        else:
            candidates = [d for d in reversed(self._ordered()) if d.key < anchor]
        return candidates[:max_count]

    async def fetch_range(
        self,
        source: SourceConfiguration,
        fields: Sequence[str],
        start: TimeKey,
        end: TimeKey,
        filter_query=None,
        highlight_query=None,
    ) -> list[LogEntryDocument]:
        self.calls.append(
            ("fetch_range", {"start": start, "end": end, "filter_query": filter_query})
        )
        if self.fail_with is not None:
            raise self.fail_with
        return [d for d in self._ordered() if start <= d.key <= end]

    async def bucketize(
        self,
        source: SourceConfiguration,
        start: int,
        end: int,
        bucket_size: int,
        filter_query=None,
    ) -> list[LogSummaryBucket]:
        self.calls.append(
            (
                "bucketize",
                {"start": start, "end": end, "bucket_size": bucket_size, "filter_query": filter_query},
            )
        )
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.buckets)

    async def fetch_by_id(self, source: SourceConfiguration, item_id: str) -> LogItemHit:
        self.calls.append(("fetch_by_id", {"item_id": item_id}))
        for d in self.documents:
            if d.gid == item_id:
                return LogItemHit(
                    index="app.log",
                    id=d.gid,
                    source=dict(d.fields),
                    sort=(d.key.time, d.key.tiebreaker),
                )
        raise LogItemNotFound(item_id)

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def make_document() -> Callable[..., LogEntryDocument]:
    def _make(time: int, tiebreaker: int = 0, **fields: Any) -> LogEntryDocument:
        fields.setdefault("message", f"entry {time}:{tiebreaker}")
        return LogEntryDocument(
            fields=fields,
            highlights={},
            gid=f"doc-{time}-{tiebreaker}",
            key=TimeKey(time, tiebreaker),
        )

    return _make


@pytest.fixture
def recording_adapter(make_document) -> RecordingAdapter:
    """Adapter holding ten documents at times 10, 20, ..., 100."""
    return RecordingAdapter(documents=[make_document(t) for t in range(10, 101, 10)])


@pytest.fixture
def static_sources() -> StaticSources:
    return StaticSources({"default": SourceConfiguration()})


@pytest.fixture
def write_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text(
            "\n".join(
                [
                    "2025-12-30T08:12:01Z [INFO] service started",
                    "2025-12-30T08:12:03Z [WARNING] retrying request id=abc123",
                    "2025-12-30T08:12:04Z [ERROR] upstream timeout route=/api/v1/items",
                    "2025-12-30T08:12:05Z [CRITICAL] database unavailable",
                ]
            )
            + "\n",
            encoding="utf-8",
        )

    return _write


@pytest.fixture
def write_mixed_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text(
            "\n".join(
                [
                    "2025-12-30T08:00:00Z [INFO] service started",
                    '{"@timestamp":"2025-12-30T08:00:01Z","level":"warn","message":"slow request",'
                    '"event":{"dataset":"api.access"},"http":{"status":504}}',
                    "not a log line",
                    "time=2025-12-30T08:00:02Z level=error msg=\"upstream timeout\" route=/items",
                    "",
                    "2025-12-30T08:00:02Z [ERROR] upstream timeout again",
                ]
            )
            + "\n",
            encoding="utf-8",
        )

    return _write
