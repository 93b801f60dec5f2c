"""Read-only snapshots handed to the validators."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum


class RequestStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


# statuses that block a new request for the same dates
BLOCKING_STATUSES = frozenset({RequestStatus.PENDING.value, RequestStatus.APPROVED.value})


@dataclass(frozen=True)
class LeaveTypeEntry:
    id: int
    name: str
    max_days_per_year: int = 0


@dataclass(frozen=True)
class BalanceSnapshot:
    employee_id: int
    leave_type_id: int
    year: int
    remaining_days: float | None


@dataclass(frozen=True)
class LeaveRequestDraft:
    employee_id: int
    leave_type_id: int | None
    start_date: date | None
    end_date: date | None
    reason: str | None = None


@dataclass(frozen=True)
class ExistingLeaveRequest:
    id: int
    employee_id: int
    leave_type_id: int
    start_date: date
    end_date: date
    status: str
    created_at: datetime | None = None
    reason: str | None = None


@dataclass(frozen=True)
class OvertimeRequestDraft:
    """Raw overtime form input; fields may be missing or unparsed strings."""

    employee_id: int
    date: date | str | None
    start_time: time | str | None
    end_time: time | str | None
    reason: str | None
