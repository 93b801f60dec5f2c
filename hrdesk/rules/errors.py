"""Validation verdicts and the error codes they carry."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Any, Mapping


class ErrorCode(str, Enum):
    # leave
    UNKNOWN_LEAVE_TYPE = "UnknownLeaveType"
    MISSING_DATE = "MissingDate"
    INVALID_RANGE = "InvalidRange"
    WEEKEND_START = "WeekendStart"
    WEEKEND_END = "WeekendEnd"
    PAST_DATE = "PastDate"
    NO_BALANCE_ON_FILE = "NoBalanceOnFile"
    NO_WORKING_DAYS = "NoWorkingDays"
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    OVERLAPPING_REQUEST = "OverlappingRequest"
    # overtime
    INVALID_OR_PAST_DATE = "InvalidOrPastDate"
    MISSING_START_TIME = "MissingStartTime"
    MISSING_END_TIME = "MissingEndTime"
    END_NOT_AFTER_START = "EndNotAfterStart"
    MISSING_REASON = "MissingReason"
    REASON_TOO_SHORT = "ReasonTooShort"
    # overtime limits applied on submission
    OVERTIME_TOO_SHORT = "OvertimeTooShort"
    OVERTIME_TOO_LONG = "OvertimeTooLong"


MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.UNKNOWN_LEAVE_TYPE: "Please select a valid leave type!",
    ErrorCode.MISSING_DATE: "Please select a start date and an end date!",
    ErrorCode.INVALID_RANGE: "End date cannot be before start date!",
    ErrorCode.WEEKEND_START: "Start date cannot be on weekend! Try {suggested}.",
    ErrorCode.WEEKEND_END: "End date cannot be on weekend! Try {suggested}.",
    ErrorCode.PAST_DATE: "Leave start date cannot be in the past!",
    ErrorCode.NO_BALANCE_ON_FILE: "No leave balance found for {year}! Please contact HR.",
    ErrorCode.NO_WORKING_DAYS: "No working days selected! Please select weekdays only.",
    ErrorCode.INSUFFICIENT_BALANCE: (
        "Insufficient leave balance! Requested: {requested} days, Available: {available} days"
    ),
    ErrorCode.OVERLAPPING_REQUEST: "You already have a leave request for overlapping dates!",
    ErrorCode.INVALID_OR_PAST_DATE: "Date must be a valid date, today or later",
    ErrorCode.MISSING_START_TIME: "Please select a valid start time",
    ErrorCode.MISSING_END_TIME: "Please select a valid end time",
    ErrorCode.END_NOT_AFTER_START: "End time must be after start time",
    ErrorCode.MISSING_REASON: "Reason is required - please provide an explanation",
    ErrorCode.REASON_TOO_SHORT: "Reason must be at least {minimum} characters long",
    ErrorCode.OVERTIME_TOO_SHORT: "Minimum overtime duration is {minimum} minutes",
    ErrorCode.OVERTIME_TOO_LONG: "Maximum daily overtime is {maximum} hours",
}


def _fmt(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class ValidationError:
    code: ErrorCode
    params: Mapping[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return MESSAGES[self.code].format(**{k: _fmt(v) for k, v in self.params.items()})

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class LeaveVerdict:
    """Outcome of a leave validation: either ``working_days`` or a single ``error``."""

    working_days: int | None = None
    error: ValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def messages(self) -> list[str]:
        return [] if self.error is None else [self.error.message]


@dataclass(frozen=True)
class OvertimeVerdict:
    """Outcome of an overtime validation; ``errors`` lists every violation found."""

    hours: float | None = None
    errors: tuple[ValidationError, ...] = ()
    overtime_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def codes(self) -> list[ErrorCode]:
        return [e.code for e in self.errors]

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self.errors]
