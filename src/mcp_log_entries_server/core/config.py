"""Runtime configuration for the log entries domain."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

PAGE_SIZE_ENV = "LOG_ENTRIES_PAGE_SIZE"
MAX_CONCURRENCY_ENV = "LOG_ENTRIES_MAX_CONCURRENCY"


@dataclass(frozen=True, slots=True)
class LogEntriesConfig:
    # Used when a caller does not pass a page or window size.
    page_size: int = 200
    # Upper bound on concurrent store calls for multi-phrase highlights.
    max_concurrent_queries: int = 4
    top_entries_per_bucket: int = 1


def _positive_int_env(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 1:
        raise ValueError(f"{name} must be >= 1")
    return value


def resolve_log_entries_config(cfg: LogEntriesConfig | None = None) -> LogEntriesConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = LogEntriesConfig()

    page_size = _positive_int_env(PAGE_SIZE_ENV)
    if page_size is not None and page_size != cfg.page_size:
        cfg = replace(cfg, page_size=page_size)

    concurrency = _positive_int_env(MAX_CONCURRENCY_ENV)
    if concurrency is not None and concurrency != cfg.max_concurrent_queries:
        cfg = replace(cfg, max_concurrent_queries=concurrency)

    return cfg
