"""File-backed store adapter.

Loads the log files of a source into an ascending key index and answers
adjacency, range, bucket and id queries from memory.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from ..errors import LogItemNotFound, StoreUnavailable
from ..formats import LineParser
from ..models import (
    Direction,
    LogEntryDocument,
    LogItemHit,
    LogSummaryBucket,
    TimeKey,
)
from ..sources import SourceConfiguration
from ..summary import bucket_bounds
from ..typed_json import LogEntryQuery
from .loader import StoredDocument, load_documents
from .matching import QueryMatcher

logger = logging.getLogger(__name__)

_Signature = tuple[tuple[str, int, int], ...]


@dataclass(frozen=True, slots=True)
class _Index:
    documents: list[StoredDocument]
    keys: list[TimeKey]
    times: list[int]

    @classmethod
    def build(cls, documents: list[StoredDocument]) -> _Index:
        return cls(
            documents=documents,
            keys=[d.key for d in documents],
            times=[d.key.time for d in documents],
        )


class FileLogStore:
    """LogEntriesAdapter over the log files named by a source configuration.

    Indexes are cached per source and rebuilt when any file's mtime or
    size changes.
    """

    def __init__(
        self,
        *,
        parser: LineParser | None = None,
        top_entries_per_bucket: int = 1,
        encoding: str = "utf-8",
        decode_errors: str = "replace",
    ) -> None:
        if top_entries_per_bucket < 1:
            raise ValueError("top_entries_per_bucket must be >= 1")
        self.parser = parser
        self.top_entries_per_bucket = top_entries_per_bucket
        self.encoding = encoding
        self.decode_errors = decode_errors
        self._cache: dict[tuple[str, ...], tuple[_Signature, _Index]] = {}

    def _signature(self, paths: Sequence[str]) -> _Signature:
        out = []
        for p in paths:
            st = Path(p).stat()
            out.append((p, st.st_mtime_ns, st.st_size))
        return tuple(out)

    async def _index(self, source: SourceConfiguration) -> _Index:
        paths = tuple(source.log_paths)
        try:
            signature = self._signature(paths)
            cached = self._cache.get(paths)
            if cached is not None and cached[0] == signature:
                return cached[1]

            documents = await load_documents(
                paths,
                parser=self.parser,
                timestamp_field=source.fields.timestamp,
                encoding=self.encoding,
                decode_errors=self.decode_errors,
            )
        except OSError as exc:
            raise StoreUnavailable(f"Cannot read log files of {source.name!r}: {exc}") from exc

        index = _Index.build(documents)
        self._cache[paths] = (signature, index)
        logger.debug("Indexed %d document(s) from %d file(s)", len(documents), len(paths))
        return index

    def _to_document(
        self,
        doc: StoredDocument,
        fields: Sequence[str],
        matcher: QueryMatcher,
        highlight_query: LogEntryQuery | None,
    ) -> LogEntryDocument:
        selected = {f: doc.fields[f] for f in fields if f in doc.fields}
        return LogEntryDocument(
            fields=selected,
            highlights=matcher.highlights(highlight_query, doc.fields, fields),
            gid=doc.gid,
            key=doc.key,
        )

    def _matching(
        self,
        candidates: Iterator[StoredDocument],
        matcher: QueryMatcher,
        filter_query: LogEntryQuery | None,
    ) -> Iterator[StoredDocument]:
        for doc in candidates:
            if matcher.matches(filter_query, doc.fields, doc.key.time):
                yield doc

    async def fetch_adjacent(
        self,
        source: SourceConfiguration,
        fields: Sequence[str],
        anchor: TimeKey,
        direction: Direction,
        max_count: int,
        filter_query: LogEntryQuery | None = None,
        highlight_query: LogEntryQuery | None = None,
    ) -> list[LogEntryDocument]:
        if max_count <= 0:
            return []
        index = await self._index(source)
        matcher = QueryMatcher(source.fields.timestamp)

        if direction is Direction.FORWARD:
            start = bisect.bisect_right(index.keys, anchor)
            candidates = iter(index.documents[start:])
        else:
            stop = bisect.bisect_left(index.keys, anchor)
            candidates = reversed(index.documents[:stop])

        out: list[LogEntryDocument] = []
        for doc in self._matching(candidates, matcher, filter_query):
            out.append(self._to_document(doc, fields, matcher, highlight_query))
            if len(out) >= max_count:
                break
        return out

    async def fetch_range(
        self,
        source: SourceConfiguration,
        fields: Sequence[str],
        start: TimeKey,
        end: TimeKey,
        filter_query: LogEntryQuery | None = None,
        highlight_query: LogEntryQuery | None = None,
    ) -> list[LogEntryDocument]:
        index = await self._index(source)
        matcher = QueryMatcher(source.fields.timestamp)
        lo = bisect.bisect_left(index.keys, start)
        hi = bisect.bisect_right(index.keys, end)
        return [
            self._to_document(doc, fields, matcher, highlight_query)
            for doc in self._matching(iter(index.documents[lo:hi]), matcher, filter_query)
        ]

    async def bucketize(
        self,
        source: SourceConfiguration,
        start: int,
        end: int,
        bucket_size: int,
        filter_query: LogEntryQuery | None = None,
    ) -> list[LogSummaryBucket]:
        index = await self._index(source)
        matcher = QueryMatcher(source.fields.timestamp)

        buckets: list[LogSummaryBucket] = []
        for lo, hi in bucket_bounds(start, end, bucket_size):
            first = bisect.bisect_left(index.times, lo)
            last = bisect.bisect_left(index.times, hi)
            matched = list(
                self._matching(iter(index.documents[first:last]), matcher, filter_query)
            )
            buckets.append(
                LogSummaryBucket(
                    start=lo,
                    end=hi,
                    entries_count=len(matched),
                    top_entry_keys=tuple(
                        d.key for d in matched[: self.top_entries_per_bucket]
                    ),
                )
            )
        return buckets

    async def fetch_by_id(self, source: SourceConfiguration, item_id: str) -> LogItemHit:
        index = await self._index(source)
        for doc in index.documents:
            if doc.gid == item_id:
                return LogItemHit(
                    index=doc.index,
                    id=doc.gid,
                    source=dict(doc.fields),
                    sort=(doc.key.time, doc.key.tiebreaker),
                )
        raise LogItemNotFound(item_id)
