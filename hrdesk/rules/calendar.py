"""Weekday arithmetic used by the leave rules."""
from __future__ import annotations

from datetime import date, timedelta

_ONE = timedelta(days=1)


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5  # 5=Sat, 6=Sun


def next_weekday(d: date) -> date:
    """``d`` itself when it is a weekday, else the following Monday."""
    while is_weekend(d):
        d += _ONE
    return d


def previous_weekday(d: date) -> date:
    while is_weekend(d):
        d -= _ONE
    return d


def count_weekdays(start: date, end: date) -> int:
    """Monday-Friday days in ``[start, end]`` inclusive. Callers ensure ``start <= end``."""
    total = 0
    cur = start
    while cur <= end:
        if not is_weekend(cur):
            total += 1
        cur += _ONE
    return total


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    return a_start <= b_end and b_start <= a_end
