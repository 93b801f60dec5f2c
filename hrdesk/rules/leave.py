"""Leave request admissibility.

The checks run in a fixed order and stop at the first violation, so the form
can walk the employee through one correction at a time (weekend start, then
weekend end, then the past-date check, and so on).
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from ..exceptions import InvalidInputError
from .calendar import count_weekdays, is_weekend, next_weekday, previous_weekday, ranges_overlap
from .errors import ErrorCode, LeaveVerdict, ValidationError
from .types import (
    BLOCKING_STATUSES, BalanceSnapshot, ExistingLeaveRequest, LeaveRequestDraft, LeaveTypeEntry,
)


def _as_date(value, name: str) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidInputError(f"{name} must be a date, got {type(value).__name__}")


def _fail(code: ErrorCode, **params) -> LeaveVerdict:
    return LeaveVerdict(error=ValidationError(code, params))


def validate_leave_request(
    draft: LeaveRequestDraft,
    balance: BalanceSnapshot | None,
    existing_requests: Iterable[ExistingLeaveRequest],
    today: date,
    leave_types: Iterable[LeaveTypeEntry],
) -> LeaveVerdict:
    """Decide whether ``draft`` may be filed and how many working days it debits."""
    today = _as_date(today, "today")
    if today is None:
        raise InvalidInputError("today is required")
    start = _as_date(draft.start_date, "start_date")
    end = _as_date(draft.end_date, "end_date")

    known = {t.id for t in leave_types}
    if draft.leave_type_id is None or draft.leave_type_id not in known:
        return _fail(ErrorCode.UNKNOWN_LEAVE_TYPE, leave_type_id=draft.leave_type_id)

    if start is None or end is None:
        return _fail(ErrorCode.MISSING_DATE)

    if end < start:
        return _fail(ErrorCode.INVALID_RANGE, start=start, end=end)

    if is_weekend(start):
        return _fail(ErrorCode.WEEKEND_START, date=start, suggested=next_weekday(start))

    if is_weekend(end):
        return _fail(ErrorCode.WEEKEND_END, date=end, suggested=previous_weekday(end))

    if start < today:
        return _fail(ErrorCode.PAST_DATE, start=start, today=today)

    if balance is None:
        return _fail(ErrorCode.NO_BALANCE_ON_FILE, year=start.year)

    working_days = count_weekdays(start, end)
    if working_days <= 0:
        return _fail(ErrorCode.NO_WORKING_DAYS)

    available = balance.remaining_days if balance.remaining_days is not None else 0
    if available < working_days:
        return _fail(ErrorCode.INSUFFICIENT_BALANCE, requested=working_days, available=available)

    for other in existing_requests:
        if other.employee_id != draft.employee_id:
            continue
        if str(getattr(other.status, "value", other.status)) not in BLOCKING_STATUSES:
            continue
        if ranges_overlap(start, end, other.start_date, other.end_date):
            return _fail(ErrorCode.OVERLAPPING_REQUEST, request_id=other.id,
                         start=other.start_date, end=other.end_date)

    return LeaveVerdict(working_days=working_days)
