"""Ordering helpers for time keys."""

from __future__ import annotations

from typing import Literal

from .models import TimeKey


def compare_time_keys(a: TimeKey, b: TimeKey) -> Literal[-1, 0, 1]:
    """Compare two keys by (time, tiebreaker)."""
    if (a.time, a.tiebreaker) < (b.time, b.tiebreaker):
        return -1
    if (a.time, a.tiebreaker) > (b.time, b.tiebreaker):
        return 1
    return 0


def predecessor(key: TimeKey) -> TimeKey:
    """Key that sorts before every entry at ``key.time``."""
    return TimeKey(time=key.time - 1, tiebreaker=0)


def successor(key: TimeKey) -> TimeKey:
    """Key that sorts after every entry at ``key.time``."""
    return TimeKey(time=key.time + 1, tiebreaker=0)

