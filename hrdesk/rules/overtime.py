"""Overtime request validation.

Unlike the leave rules, every violation is collected so the form can show the
whole list at once.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time

from ..exceptions import InvalidInputError
from .errors import ErrorCode, OvertimeVerdict, ValidationError
from .types import OvertimeRequestDraft

MIN_REASON_LENGTH = 10

_TIME_FORMATS = ("%H:%M", "%H:%M:%S")


def parse_date(value) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def parse_time(value) -> time | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        s = value.strip()
        for fmt in _TIME_FORMATS:
            try:
                return datetime.strptime(s, fmt).time()
            except ValueError:
                continue
    return None


def overtime_hours(start: time, end: time) -> float:
    span = datetime.combine(date.min, end) - datetime.combine(date.min, start)
    return span.total_seconds() / 3600.0


def validate_overtime_request(draft: OvertimeRequestDraft, today: date) -> OvertimeVerdict:
    """Validate one overtime submission, reporting every problem found."""
    if not isinstance(today, date):
        raise InvalidInputError("today must be a date")
    if isinstance(today, datetime):
        today = today.date()
    if draft.reason is not None and not isinstance(draft.reason, str):
        raise InvalidInputError("reason must be a string")

    errors: list[ValidationError] = []

    day = parse_date(draft.date)
    if day is None:
        errors.append(ValidationError(ErrorCode.INVALID_OR_PAST_DATE, {"date": draft.date}))
    elif day < today:
        errors.append(ValidationError(ErrorCode.INVALID_OR_PAST_DATE, {"date": day}))

    start = parse_time(draft.start_time)
    if start is None:
        errors.append(ValidationError(ErrorCode.MISSING_START_TIME))

    end = parse_time(draft.end_time)
    if end is None:
        errors.append(ValidationError(ErrorCode.MISSING_END_TIME))

    if start is not None and end is not None and end <= start:
        errors.append(ValidationError(ErrorCode.END_NOT_AFTER_START, {"start": start, "end": end}))

    reason = (draft.reason or "").strip()
    if not reason:
        errors.append(ValidationError(ErrorCode.MISSING_REASON))
    elif len(reason) < MIN_REASON_LENGTH:
        errors.append(ValidationError(ErrorCode.REASON_TOO_SHORT,
                                      {"length": len(reason), "minimum": MIN_REASON_LENGTH}))

    if errors:
        return OvertimeVerdict(errors=tuple(errors), overtime_date=day,
                               start_time=start, end_time=end, reason=reason)
    return OvertimeVerdict(hours=overtime_hours(start, end), overtime_date=day,
                           start_time=start, end_time=end, reason=reason)


def apply_overtime_limits(verdict: OvertimeVerdict, min_minutes: int, max_hours: float) -> OvertimeVerdict:
    """Reject an otherwise valid overtime request that is too short or too long.

    Only runs on a passing verdict; a failing one is returned untouched.
    """
    if not verdict.ok:
        return verdict

    errors: list[ValidationError] = []
    if verdict.hours * 60 < min_minutes:
        errors.append(ValidationError(ErrorCode.OVERTIME_TOO_SHORT, {"minimum": min_minutes}))
    elif verdict.hours > max_hours:
        errors.append(ValidationError(ErrorCode.OVERTIME_TOO_LONG, {"maximum": max_hours}))

    if not errors:
        return verdict
    return replace(verdict, hours=None, errors=tuple(errors))
