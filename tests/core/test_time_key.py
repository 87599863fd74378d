from __future__ import annotations

from mcp_log_entries_server.core.models import TimeKey
from mcp_log_entries_server.core.time_key import (
    compare_time_keys,
    predecessor,
    successor,
)


def test_compare_orders_by_time_then_tiebreaker() -> None:
    assert compare_time_keys(TimeKey(1, 9), TimeKey(2, 0)) == -1
    assert compare_time_keys(TimeKey(2, 1), TimeKey(2, 0)) == 1
    assert compare_time_keys(TimeKey(2, 3), TimeKey(2, 3)) == 0


def test_compare_is_consistent_with_dataclass_ordering() -> None:
    keys = [TimeKey(5, 2), TimeKey(1, 7), TimeKey(5, 0), TimeKey(3, 3)]
    assert sorted(keys) == [TimeKey(1, 7), TimeKey(3, 3), TimeKey(5, 0), TimeKey(5, 2)]


def test_predecessor_sorts_before_every_key_at_time() -> None:
    p = predecessor(TimeKey(100, 0))
    assert p == TimeKey(99, 0)
    assert p < TimeKey(100, 0)


def test_successor_sorts_after_every_key_at_time() -> None:
    s = successor(TimeKey(100, 7))
    assert s == TimeKey(101, 0)
    assert TimeKey(100, 10**12) < s

