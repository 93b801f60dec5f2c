"""Business-timezone clock.

All date comparisons are anchored to one fixed timezone. Validators receive
"today" from here as a parameter and never read the clock themselves.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Callable
from zoneinfo import ZoneInfo

Clock = Callable[[], date]


def business_now(tz: ZoneInfo | str) -> datetime:
    if isinstance(tz, str):
        tz = ZoneInfo(tz)
    return datetime.now(tz)


def business_today(tz: ZoneInfo | str) -> date:
    """Current calendar date in the business timezone."""
    return business_now(tz).date()


def fixed_clock(day: date) -> Clock:
    """Clock that always answers ``day``; handy for tests and back-dated runs."""
    return lambda: day


def zone_clock(tz: ZoneInfo | str) -> Clock:
    return lambda: business_today(tz)
