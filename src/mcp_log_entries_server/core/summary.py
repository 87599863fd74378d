"""Summary bucket helpers."""

from __future__ import annotations

from collections.abc import Iterable

from .errors import InvalidWindow
from .models import LogSummaryBucket, LogSummaryHighlightBucket


def validate_bucket_range(start: int, end: int, bucket_size: int) -> None:
    if bucket_size <= 0:
        raise InvalidWindow("bucket_size must be > 0")
    if start > end:
        raise InvalidWindow("start must not be after end")


def bucket_bounds(start: int, end: int, bucket_size: int) -> list[tuple[int, int]]:
    """Consecutive [lo, hi) intervals covering [start, end)."""
    validate_bucket_range(start, end, bucket_size)
    return [(lo, min(lo + bucket_size, end)) for lo in range(start, end, bucket_size)]


def bucket_has_entries(bucket: LogSummaryBucket) -> bool:
    return bucket.entries_count > 0 and len(bucket.top_entry_keys) > 0


def to_highlight_bucket(bucket: LogSummaryBucket) -> LogSummaryHighlightBucket:
    """Reduce a non-empty bucket to its first representative key."""
    return LogSummaryHighlightBucket(
        start=bucket.start,
        end=bucket.end,
        entries_count=bucket.entries_count,
        representative_key=bucket.top_entry_keys[0],
    )


def to_highlight_buckets(buckets: Iterable[LogSummaryBucket]) -> list[LogSummaryHighlightBucket]:
    """Drop empty buckets and keep one representative key per bucket."""
    return [to_highlight_bucket(b) for b in buckets if bucket_has_entries(b)]
