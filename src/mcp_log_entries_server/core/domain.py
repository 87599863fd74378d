"""Log entries domain.

Caller-facing operations: pages and windows of rendered entries, ranges
with highlights, summary buckets and single log items. Store access goes
through a LogEntriesAdapter; source configurations through a
SourceRegistry.
"""

from __future__ import annotations

import asyncio
import logging
import warnings
from collections.abc import Awaitable, Iterable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from .adapter import LogEntriesAdapter
from .config import LogEntriesConfig, resolve_log_entries_config
from .errors import InvalidWindow
from .fetching import fetch_adjacent, fetch_range, in_ascending_order
from .log_item import convert_hit_to_item
from .materializer import materialize_all
from .message import CompiledFormattingRules, compile_formatting_rules, get_builtin_rules
from .models import (
    Cursor,
    Direction,
    EntriesAround,
    HighlightRequest,
    LogEntriesItem,
    LogEntry,
    LogEntryDocument,
    LogSummaryBucket,
    LogSummaryHighlightBucket,
    TimeKey,
)
from .queries import combine_queries, create_highlight_query, create_time_range_query
from .sources import FieldColumn, SourceConfiguration, SourceRegistry
from .summary import to_highlight_buckets, validate_bucket_range
from .typed_json import LogEntryQuery
from .windowing import DocumentWindow, fetch_documents_around, fetch_documents_page

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class _SourceContext:
    configuration: SourceConfiguration
    rules: CompiledFormattingRules
    required_fields: list[str]

    def render(self, documents: Sequence[LogEntryDocument]) -> list[LogEntry]:
        return materialize_all(documents, self.configuration.log_columns, self.rules.format)

    def window_filter(
        self, start: int, end: int, filter_query: LogEntryQuery | None
    ) -> LogEntryQuery | None:
        time_range = create_time_range_query(self.configuration.fields.timestamp, start, end)
        return combine_queries(time_range, filter_query)


def get_required_fields(
    configuration: SourceConfiguration, rules: CompiledFormattingRules
) -> list[str]:
    """Fields the column schema and formatting rules read, de-duplicated."""
    from_columns = [c.field for c in configuration.log_columns if isinstance(c, FieldColumn)]
    return list(dict.fromkeys([*from_columns, *rules.required_fields]))


async def _gather_all(aws: Iterable[Awaitable[T]]) -> list[T]:
    """Await all, cancelling the rest as soon as one fails."""
    tasks = [asyncio.ensure_future(a) for a in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class LogEntriesDomain:
    def __init__(
        self,
        adapter: LogEntriesAdapter,
        sources: SourceRegistry,
        config: LogEntriesConfig | None = None,
    ) -> None:
        self.adapter = adapter
        self.sources = sources
        self.config = resolve_log_entries_config(config)

    async def _context(self, source_id: str) -> _SourceContext:
        configuration = await self.sources.get_source_configuration(source_id)
        rules = compile_formatting_rules(get_builtin_rules(configuration.fields.message))
        return _SourceContext(
            configuration=configuration,
            rules=rules,
            required_fields=get_required_fields(configuration, rules),
        )

    def _highlight_query(self, ctx: _SourceContext, term: str | None) -> LogEntryQuery | None:
        if not term:
            return None
        return create_highlight_query(term, ctx.required_fields)

    async def _bounded(self, semaphore: asyncio.Semaphore, aw: Awaitable[T]) -> T:
        async with semaphore:
            return await aw

    async def _window_around(
        self,
        source_id: str,
        center: TimeKey,
        start_date: int,
        end_date: int,
        size: int | None,
        filter_query: LogEntryQuery | None,
        highlight_term: str | None,
    ) -> tuple[_SourceContext, DocumentWindow]:
        total_size = self.config.page_size if size is None else size
        if total_size < 0:
            raise InvalidWindow("size must be >= 0")
        if start_date > end_date:
            raise InvalidWindow("start_date must not be after end_date")

        ctx = await self._context(source_id)
        window = await fetch_documents_around(
            self.adapter,
            ctx.configuration,
            ctx.required_fields,
            center,
            total_size,
            filter_query=ctx.window_filter(start_date, end_date, filter_query),
            highlight_query=self._highlight_query(ctx, highlight_term),
        )
        return ctx, window

    async def get_entries_around(
        self,
        source_id: str,
        center: TimeKey,
        *,
        start_date: int,
        end_date: int,
        size: int | None = None,
        filter_query: LogEntryQuery | None = None,
        highlight_term: str | None = None,
    ) -> list[LogEntry]:
        """Entries around a center key, ascending.

        For odd sizes the extra entry lands after the center; the center
        (or its nearest successor) opens the later half.
        """
        ctx, window = await self._window_around(
            source_id, center, start_date, end_date, size, filter_query, highlight_term
        )
        return ctx.render(window.documents)

    async def get_entries_around_split(
        self,
        source_id: str,
        center: TimeKey,
        *,
        start_date: int,
        end_date: int,
        size: int | None = None,
        filter_query: LogEntryQuery | None = None,
        highlight_term: str | None = None,
    ) -> EntriesAround:
        """Deprecated: the get_entries_around window as separate halves."""
        warnings.warn(
            "get_entries_around_split is deprecated; use get_entries_around",
            DeprecationWarning,
            stacklevel=2,
        )
        ctx, window = await self._window_around(
            source_id, center, start_date, end_date, size, filter_query, highlight_term
        )
        return EntriesAround(
            entries_before=ctx.render(window.before),
            entries_after=ctx.render(window.after),
        )

    async def get_entries(
        self,
        source_id: str,
        *,
        start_date: int,
        end_date: int,
        filter_query: LogEntryQuery | None = None,
        cursor: Cursor | None = None,
        size: int | None = None,
        highlight_term: str | None = None,
    ) -> list[LogEntry]:
        """One ascending page of entries inside [start_date, end_date]."""
        page_size = self.config.page_size if size is None else size
        if page_size < 0:
            raise InvalidWindow("size must be >= 0")
        if start_date > end_date:
            raise InvalidWindow("start_date must not be after end_date")

        ctx = await self._context(source_id)
        documents = await fetch_documents_page(
            self.adapter,
            ctx.configuration,
            ctx.required_fields,
            cursor,
            page_size,
            start=start_date,
            end=end_date,
            filter_query=ctx.window_filter(start_date, end_date, filter_query),
            highlight_query=self._highlight_query(ctx, highlight_term),
        )
        return ctx.render(documents)

    async def get_entries_between(
        self,
        source_id: str,
        start_key: TimeKey,
        end_key: TimeKey,
        *,
        filter_query: LogEntryQuery | None = None,
        highlight_query: LogEntryQuery | None = None,
    ) -> list[LogEntry]:
        ctx = await self._context(source_id)
        documents = await fetch_range(
            self.adapter,
            ctx.configuration,
            ctx.required_fields,
            start_key,
            end_key,
            filter_query=filter_query,
            highlight_query=highlight_query,
        )
        return ctx.render(documents)

    async def get_entry_highlights(
        self,
        source_id: str,
        start_key: TimeKey,
        end_key: TimeKey,
        highlights: Sequence[HighlightRequest],
        *,
        filter_query: LogEntryQuery | None = None,
    ) -> list[list[LogEntry]]:
        """Per phrase: matches before, inside and after [start_key, end_key].

        Results are index-aligned with ``highlights``.
        """
        for h in highlights:
            if h.count_before < 0 or h.count_after < 0:
                raise InvalidWindow("highlight counts must be >= 0")

        ctx = await self._context(source_id)
        semaphore = asyncio.Semaphore(self.config.max_concurrent_queries)

        async def for_phrase(highlight: HighlightRequest) -> list[LogEntry]:
            highlight_query = create_highlight_query(highlight.query, ctx.required_fields)
            query = combine_queries(filter_query, highlight_query, occur="filter")
            descending, contained, after = await _gather_all(
                [
                    self._bounded(
                        semaphore,
                        fetch_adjacent(
                            self.adapter,
                            ctx.configuration,
                            ctx.required_fields,
                            start_key,
                            Direction.BACKWARD,
                            highlight.count_before,
                            filter_query=query,
                            highlight_query=highlight_query,
                        ),
                    ),
                    self._bounded(
                        semaphore,
                        fetch_range(
                            self.adapter,
                            ctx.configuration,
                            ctx.required_fields,
                            start_key,
                            end_key,
                            filter_query=query,
                            highlight_query=highlight_query,
                        ),
                    ),
                    self._bounded(
                        semaphore,
                        fetch_adjacent(
                            self.adapter,
                            ctx.configuration,
                            ctx.required_fields,
                            end_key,
                            Direction.FORWARD,
                            highlight.count_after,
                            filter_query=query,
                            highlight_query=highlight_query,
                        ),
                    ),
                ]
            )
            before = in_ascending_order(descending, Direction.BACKWARD)
            return ctx.render([*before, *contained, *after])

        return await _gather_all(for_phrase(h) for h in highlights)

    async def get_summary_buckets(
        self,
        source_id: str,
        start: int,
        end: int,
        bucket_size: int,
        *,
        filter_query: LogEntryQuery | None = None,
    ) -> list[LogSummaryBucket]:
        validate_bucket_range(start, end, bucket_size)
        ctx = await self._context(source_id)
        return list(
            await self.adapter.bucketize(
                ctx.configuration, start, end, bucket_size, filter_query=filter_query
            )
        )

    async def get_summary_highlight_buckets(
        self,
        source_id: str,
        start: int,
        end: int,
        bucket_size: int,
        highlight_phrases: Sequence[str],
        *,
        filter_query: LogEntryQuery | None = None,
    ) -> list[list[LogSummaryHighlightBucket]]:
        """Per phrase: non-empty buckets reduced to one representative key."""
        validate_bucket_range(start, end, bucket_size)
        ctx = await self._context(source_id)
        semaphore = asyncio.Semaphore(self.config.max_concurrent_queries)

        async def for_phrase(phrase: str) -> list[LogSummaryHighlightBucket]:
            highlight_query = create_highlight_query(phrase, ctx.required_fields)
            query = combine_queries(filter_query, highlight_query, occur="must")
            buckets = await self._bounded(
                semaphore,
                self.adapter.bucketize(
                    ctx.configuration, start, end, bucket_size, filter_query=query
                ),
            )
            return to_highlight_buckets(buckets)

        return await _gather_all(for_phrase(p) for p in highlight_phrases)

    async def get_log_item(
        self, item_id: str, source_configuration: SourceConfiguration
    ) -> LogEntriesItem:
        hit = await self.adapter.fetch_by_id(source_configuration, item_id)
        return convert_hit_to_item(hit)
