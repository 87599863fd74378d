"""Time-window parsing helpers.

Converts user-friendly time window selectors into UTC datetime ranges and
epoch-millisecond bounds.
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime, timedelta

_HOUR_RE = re.compile(r"^(?P<d>\d{4}-\d{2}-\d{2})T(?P<h>\d{2})$")
_WEEK_RE = re.compile(r"^(?P<y>\d{4})-W(?P<w>\d{2})$")
_MONTH_RE = re.compile(r"^(?P<y>\d{4})-(?P<m>\d{2})$")
_YEAR_RE = re.compile(r"^(?P<y>\d{4})$")

DEFAULT_HOURS_LOOKBACK = 24


def parse_iso_dt(s: str) -> datetime:
    """Parse ISO8601 datetime. If tz is missing, assume UTC."""
    dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_epoch_millis(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp() * 1000)


def from_epoch_millis(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=UTC)


def range_for_date(s: str) -> tuple[datetime, datetime]:
    """Return the UTC day window for an ISO date string."""
    d = date.fromisoformat(s)
    start = datetime(d.year, d.month, d.day, tzinfo=UTC)
    return start, start + timedelta(days=1)


def range_for_hour(s: str) -> tuple[datetime, datetime]:
    """Return the UTC hour window for a YYYY-MM-DDTHH selector."""
    m = _HOUR_RE.match(s)
    if not m:
        raise ValueError("hour must look like YYYY-MM-DDTHH (e.g., 2025-12-29T10)")
    d = date.fromisoformat(m.group("d"))
    start = datetime(d.year, d.month, d.day, int(m.group("h")), tzinfo=UTC)
    return start, start + timedelta(hours=1)


def range_for_week(s: str) -> tuple[datetime, datetime]:
    """Return the UTC week window for a YYYY-Www selector."""
    m = _WEEK_RE.match(s)
    if not m:
        raise ValueError("week must look like YYYY-Www (e.g., 2025-W52)")
    start_date = date.fromisocalendar(int(m.group("y")), int(m.group("w")), 1)  # Monday
    start = datetime(start_date.year, start_date.month, start_date.day, tzinfo=UTC)
    return start, start + timedelta(days=7)


def range_for_month(s: str) -> tuple[datetime, datetime]:
    """Return the UTC month window for a YYYY-MM selector."""
    m = _MONTH_RE.match(s)
    if not m:
        raise ValueError("month must look like YYYY-MM (e.g., 2025-12)")
    y = int(m.group("y"))
    mo = int(m.group("m"))
    start = datetime(y, mo, 1, tzinfo=UTC)
    end = datetime(y + 1, 1, 1, tzinfo=UTC) if mo == 12 else datetime(y, mo + 1, 1, tzinfo=UTC)
    return start, end


def range_for_year(s: str) -> tuple[datetime, datetime]:
    """Return the UTC year window for a YYYY selector."""
    m = _YEAR_RE.match(s)
    if not m:
        raise ValueError("year must look like YYYY (e.g., 2025)")
    y = int(m.group("y"))
    return datetime(y, 1, 1, tzinfo=UTC), datetime(y + 1, 1, 1, tzinfo=UTC)


def resolve_time_window(
    *,
    since: str | None = None,
    until: str | None = None,
    date_: str | None = None,
    hour: str | None = None,
    week: str | None = None,
    month: str | None = None,
    year: str | None = None,
    days_lookback: int | None = None,
    hours_lookback: int | None = None,
    now: datetime | None = None,
) -> tuple[datetime | None, datetime | None]:
    """Resolve a UTC time window.

    Priority: lookback > date/hour/week/month/year > since/until.
    """
    if days_lookback is not None and hours_lookback is not None:
        raise ValueError("Use either days_lookback or hours_lookback, not both.")
    if days_lookback is not None or hours_lookback is not None:
        delta = (
            timedelta(days=days_lookback)
            if days_lookback is not None
            else timedelta(hours=hours_lookback or 0)
        )
        if delta < timedelta(0):
            raise ValueError("lookback must be >= 0")
        end = now or datetime.now(UTC)
        return end - delta, end

    if date_:
        return range_for_date(date_)
    if hour:
        return range_for_hour(hour)
    if week:
        return range_for_week(week)
    if month:
        return range_for_month(month)
    if year:
        return range_for_year(year)

    s = parse_iso_dt(since) if since else None
    u = parse_iso_dt(until) if until else None
    return s, u


def resolve_time_range_millis(
    *,
    now: datetime | None = None,
    **selectors,
) -> tuple[int, int]:
    """Resolve selectors into closed epoch-millisecond bounds.

    The half-open window [since, until) becomes [start, until - 1ms].
    Without any selector the last DEFAULT_HOURS_LOOKBACK hours are used;
    a missing bound defaults to the epoch or to ``now``.
    """
    now = now or datetime.now(UTC)
    if not any(v is not None for v in selectors.values()):
        selectors = {"hours_lookback": DEFAULT_HOURS_LOOKBACK}

    since, until = resolve_time_window(now=now, **selectors)
    start = to_epoch_millis(since) if since is not None else 0
    end = to_epoch_millis(until) - 1 if until is not None else to_epoch_millis(now)
    if start > end:
        raise ValueError("since must be < until")
    return start, end
