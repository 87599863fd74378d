from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from mcp_log_entries_server.core.time_window import (
    from_epoch_millis,
    parse_iso_dt,
    range_for_hour,
    range_for_month,
    range_for_week,
    range_for_year,
    resolve_time_range_millis,
    resolve_time_window,
    to_epoch_millis,
)

NOW = datetime(2025, 12, 31, 12, 0, 0, tzinfo=UTC)


def test_parse_iso_dt_assumes_utc() -> None:
    dt = parse_iso_dt("2025-12-31T10:00:00")
    assert dt == datetime(2025, 12, 31, 10, 0, 0, tzinfo=UTC)


def test_epoch_millis_round_trip() -> None:
    dt = datetime(2025, 12, 30, 8, 0, 0, 250000, tzinfo=UTC)
    assert to_epoch_millis(dt) == 1767081600250
    assert from_epoch_millis(1767081600250) == dt


def test_range_for_hour_rounds_to_hour() -> None:
    start, end = range_for_hour("2025-12-31T10")
    assert start == datetime(2025, 12, 31, 10, 0, 0, tzinfo=UTC)
    assert end == datetime(2025, 12, 31, 11, 0, 0, tzinfo=UTC)


def test_range_for_week_starts_monday() -> None:
    start, end = range_for_week("2025-W01")
    assert start == datetime(2024, 12, 30, tzinfo=UTC)
    assert end - start == timedelta(days=7)


def test_range_for_week_invalid_format() -> None:
    with pytest.raises(ValueError):
        range_for_week("2025-52")


def test_range_for_month_december() -> None:
    start, end = range_for_month("2025-12")
    assert start == datetime(2025, 12, 1, tzinfo=UTC)
    assert end == datetime(2026, 1, 1, tzinfo=UTC)


def test_range_for_month_invalid_format() -> None:
    with pytest.raises(ValueError):
        range_for_month("2025-W52")


def test_range_for_year_invalid_format() -> None:
    with pytest.raises(ValueError):
        range_for_year("25")


def test_resolve_date_overrides_since_until() -> None:
    since, until = resolve_time_window(
        since="2025-12-31T10:00:00Z",
        until="2025-12-31T11:00:00Z",
        date_="2025-12-30",
    )
    assert since == datetime(2025, 12, 30, 0, 0, 0, tzinfo=UTC)
    assert until == datetime(2025, 12, 31, 0, 0, 0, tzinfo=UTC)


def test_resolve_lookback_overrides_selectors() -> None:
    since, until = resolve_time_window(year="2024", days_lookback=3, now=NOW)
    assert since == NOW - timedelta(days=3)
    assert until == NOW


def test_resolve_lookback_conflict() -> None:
    with pytest.raises(ValueError):
        resolve_time_window(days_lookback=1, hours_lookback=2)


def test_resolve_negative_lookback() -> None:
    with pytest.raises(ValueError):
        resolve_time_window(hours_lookback=-1, now=NOW)


def test_millis_bounds_are_closed() -> None:
    start, end = resolve_time_range_millis(hour="2025-12-31T10")
    assert start == to_epoch_millis(datetime(2025, 12, 31, 10, tzinfo=UTC))
    assert end == to_epoch_millis(datetime(2025, 12, 31, 11, tzinfo=UTC)) - 1


def test_millis_default_to_last_day() -> None:
    start, end = resolve_time_range_millis(now=NOW)
    assert start == to_epoch_millis(NOW - timedelta(hours=24))
    assert end == to_epoch_millis(NOW) - 1


def test_millis_open_bounds() -> None:
    start, end = resolve_time_range_millis(since="2025-12-31T00:00:00Z", now=NOW)
    assert start == to_epoch_millis(datetime(2025, 12, 31, tzinfo=UTC))
    assert end == to_epoch_millis(NOW)

    start, _ = resolve_time_range_millis(until="2025-12-31T00:00:00Z", now=NOW)
    assert start == 0


def test_millis_inverted_window() -> None:
    with pytest.raises(ValueError):
        resolve_time_range_millis(since="2025-12-31T00:00:00Z", until="2025-12-30T00:00:00Z")
