"""
Persistence collaborator for the request rules.

``LeaveStore`` is the narrow interface the submission flow needs;
``SqlLeaveStore`` implements it (and the approval workflow's extras) over a
SQLAlchemy session. The caller owns the session and its transaction.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from functools import wraps
from typing import List, Optional, Protocol

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .core.models import LeaveBalance, LeaveRequest, LeaveType, OvertimeRequest
from .exceptions import DatabaseOperationError
from .rules.types import BalanceSnapshot, ExistingLeaveRequest, LeaveTypeEntry, RequestStatus
from .schemas import (
    LeaveBalanceRead, LeaveRequestCreate, LeaveRequestRead, OvertimeRequestCreate, OvertimeRequestRead,
)

logger = logging.getLogger(__name__)

DEFAULT_LEAVE_TYPES = (
    ("Sick Leave", "Leave for illness or medical reasons"),
    ("Vacation Leave", "Annual vacation leave"),
)


class LeaveStore(Protocol):
    def get_leave_balance(self, employee_id: int, leave_type_id: int, year: int) -> BalanceSnapshot | None: ...
    def get_leave_types(self) -> list[LeaveTypeEntry]: ...
    def get_overlapping_requests(self, employee_id: int, start: date, end: date) -> list[ExistingLeaveRequest]: ...
    def insert_leave_request(self, record: LeaveRequestCreate) -> LeaveRequestRead: ...
    def insert_overtime_request(self, record: OvertimeRequestCreate) -> OvertimeRequestRead: ...


def _db_op(action: str):
    """Log SQLAlchemy failures and re-raise them as DatabaseOperationError."""
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(f"Database error {action}: {e}")
                raise DatabaseOperationError(f"Failed {action}: {e}") from e
        return wrapper
    return deco


def _day_bounds(start: date | None, end: date | None) -> tuple[datetime | None, datetime | None]:
    lo = datetime.combine(start, time.min) if start else None
    hi = datetime.combine(end + timedelta(days=1), time.min) if end else None
    return lo, hi


def _type_entry(row: LeaveType) -> LeaveTypeEntry:
    return LeaveTypeEntry(id=row.id, name=row.name, max_days_per_year=row.max_days_per_year or 0)


def _existing(row: LeaveRequest) -> ExistingLeaveRequest:
    return ExistingLeaveRequest(
        id=row.id,
        employee_id=row.employee_id,
        leave_type_id=row.leave_type_id,
        start_date=row.start_date,
        end_date=row.end_date,
        status=row.status,
        created_at=row.created_at,
        reason=row.reason,
    )


class SqlLeaveStore:
    """SQLAlchemy implementation of :class:`LeaveStore`."""

    def __init__(self, session: Session):
        self.session = session

    # ---------- leave types ----------
    @_db_op("loading leave types")
    def get_leave_types(self) -> list[LeaveTypeEntry]:
        rows = self.session.query(LeaveType).order_by(LeaveType.name.asc()).all()
        return [_type_entry(r) for r in rows]

    @_db_op("looking up leave type")
    def get_leave_type_by_name(self, name: str) -> LeaveTypeEntry | None:
        """Exact match first, then trimmed, then case-insensitive."""
        if not name:
            return None
        s = self.session
        row = s.query(LeaveType).filter(LeaveType.name == name).first()
        if row is None and name.strip() != name:
            row = s.query(LeaveType).filter(LeaveType.name == name.strip()).first()
        if row is None:
            row = (
                s.query(LeaveType)
                .filter(func.lower(LeaveType.name) == name.strip().lower())
                .first()
            )
        return _type_entry(row) if row else None

    @_db_op("creating default leave types")
    def ensure_default_leave_types(self, days_per_year: int = 15) -> list[LeaveTypeEntry]:
        existing = {name for (name,) in self.session.query(LeaveType.name).all()}
        for name, description in DEFAULT_LEAVE_TYPES:
            if name not in existing:
                self.session.add(LeaveType(name=name, description=description,
                                           max_days_per_year=days_per_year))
                logger.info(f"Created leave type '{name}' ({days_per_year} days/year).")
        self.session.flush()
        return self.get_leave_types()

    # ---------- balances ----------
    @_db_op("loading leave balance")
    def get_balance_row(self, employee_id: int, leave_type_id: int, year: int,
                        lock: bool = False) -> Optional[LeaveBalance]:
        q = (
            self.session.query(LeaveBalance)
            .filter(LeaveBalance.employee_id == employee_id,
                    LeaveBalance.leave_type_id == leave_type_id,
                    LeaveBalance.year == year)
        )
        if lock:
            q = q.with_for_update()
        return q.first()

    def get_leave_balance(self, employee_id: int, leave_type_id: int, year: int) -> BalanceSnapshot | None:
        row = self.get_balance_row(employee_id, leave_type_id, year)
        if row is None:
            return None
        return BalanceSnapshot(
            employee_id=row.employee_id,
            leave_type_id=row.leave_type_id,
            year=row.year,
            remaining_days=row.remaining_days,
        )

    @_db_op("listing leave balances")
    def list_balances(self, employee_id: int | None = None, year: int | None = None) -> List[LeaveBalance]:
        q = self.session.query(LeaveBalance)
        if employee_id is not None:
            q = q.filter(LeaveBalance.employee_id == employee_id)
        if year is not None:
            q = q.filter(LeaveBalance.year == year)
        return q.order_by(LeaveBalance.employee_id.asc(), LeaveBalance.leave_type_id.asc()).all()

    @_db_op("creating leave balance")
    def create_balance(self, employee_id: int, leave_type_id: int, year: int,
                       total_days: int | None, carry_over_days: int = 0) -> LeaveBalance:
        row = LeaveBalance(employee_id=employee_id, leave_type_id=leave_type_id, year=year,
                           total_days=total_days, used_days=0, carry_over_days=carry_over_days)
        self.session.add(row)
        self.session.flush()
        return row

    def ensure_leave_balances(self, employee_id: int, year: int,
                              total_days: int | None = None) -> List[LeaveBalanceRead]:
        """Create a balance for every catalog type the employee lacks in ``year``."""
        for lt in self.get_leave_types():
            if self.get_balance_row(employee_id, lt.id, year) is None:
                days = lt.max_days_per_year if total_days is None else total_days
                self.create_balance(employee_id, lt.id, year, days)
                logger.info(f"Initialized {lt.name} balance for employee {employee_id} in {year}: {days} days.")
        return [LeaveBalanceRead.model_validate(r) for r in self.list_balances(employee_id, year)]

    @_db_op("updating leave balance")
    def adjust_used_days(self, row: LeaveBalance, delta: int) -> LeaveBalance:
        row.used_days = max(0, (row.used_days or 0) + delta)
        self.session.flush()
        return row

    # ---------- leave requests ----------
    @_db_op("checking overlapping leave requests")
    def get_overlapping_requests(self, employee_id: int, start: date, end: date) -> list[ExistingLeaveRequest]:
        rows = (
            self.session.query(LeaveRequest)
            .filter(LeaveRequest.employee_id == employee_id,
                    LeaveRequest.start_date <= end,
                    LeaveRequest.end_date >= start)
            .order_by(LeaveRequest.start_date.asc())
            .all()
        )
        return [_existing(r) for r in rows]

    @_db_op("saving leave request")
    def insert_leave_request(self, record: LeaveRequestCreate) -> LeaveRequestRead:
        row = LeaveRequest(**record.model_dump(), status=RequestStatus.PENDING.value)
        self.session.add(row)
        self.session.flush()
        logger.info(f"Leave request {row.id} stored for employee {row.employee_id} "
                    f"({row.start_date} to {row.end_date}, {row.working_days} day(s)).")
        return LeaveRequestRead.model_validate(row)

    @_db_op("loading leave request")
    def get_leave_request(self, request_id: int) -> Optional[LeaveRequest]:
        return self.session.get(LeaveRequest, request_id)

    @_db_op("listing leave requests")
    def list_leave_requests(self, employee_id: int | None = None, start: date | None = None,
                            end: date | None = None, status: str | None = None) -> List[LeaveRequestRead]:
        """All requests, optionally narrowed to an employee, a date window and a status."""
        q = self.session.query(LeaveRequest)
        if employee_id is not None:
            q = q.filter(LeaveRequest.employee_id == employee_id)
        if start is not None:
            q = q.filter(LeaveRequest.end_date >= start)
        if end is not None:
            q = q.filter(LeaveRequest.start_date <= end)
        if status:
            q = q.filter(LeaveRequest.status == status)
        rows = q.order_by(LeaveRequest.start_date.asc(), LeaveRequest.id.asc()).all()
        return [LeaveRequestRead.model_validate(r) for r in rows]

    @_db_op("updating leave request status")
    def set_leave_status(self, row: LeaveRequest, status: RequestStatus,
                         notes: str | None = None) -> LeaveRequestRead:
        row.status = status.value
        row.supervisor_notes = notes
        row.decided_at = datetime.now(timezone.utc)
        self.session.flush()
        return LeaveRequestRead.model_validate(row)

    @_db_op("deleting leave request")
    def delete_leave_request(self, row: LeaveRequest) -> None:
        self.session.delete(row)
        self.session.flush()

    # ---------- overtime ----------
    @_db_op("saving overtime request")
    def insert_overtime_request(self, record: OvertimeRequestCreate) -> OvertimeRequestRead:
        row = OvertimeRequest(**record.model_dump(), status=RequestStatus.PENDING.value)
        self.session.add(row)
        self.session.flush()
        logger.info(f"Overtime request {row.id} stored for employee {row.employee_id} "
                    f"({row.overtime_start:%Y-%m-%d %H:%M} to {row.overtime_end:%H:%M}).")
        return OvertimeRequestRead.model_validate(row)

    @_db_op("loading overtime request")
    def get_overtime_request(self, request_id: int) -> Optional[OvertimeRequest]:
        return self.session.get(OvertimeRequest, request_id)

    @_db_op("listing overtime requests")
    def list_overtime_requests(self, employee_id: int | None = None, start: date | None = None,
                               end: date | None = None, status: str | None = None) -> List[OvertimeRequestRead]:
        q = self.session.query(OvertimeRequest)
        if employee_id is not None:
            q = q.filter(OvertimeRequest.employee_id == employee_id)
        lo, hi = _day_bounds(start, end)
        if lo is not None:
            q = q.filter(OvertimeRequest.overtime_start >= lo)
        if hi is not None:
            q = q.filter(OvertimeRequest.overtime_start < hi)
        if status:
            q = q.filter(OvertimeRequest.status == status)
        rows = q.order_by(OvertimeRequest.overtime_start.desc(), OvertimeRequest.id.desc()).all()
        return [OvertimeRequestRead.model_validate(r) for r in rows]

    @_db_op("updating overtime request status")
    def set_overtime_status(self, row: OvertimeRequest, status: RequestStatus,
                            notes: str | None = None) -> OvertimeRequestRead:
        row.status = status.value
        row.supervisor_notes = notes
        row.decided_at = datetime.now(timezone.utc)
        self.session.flush()
        return OvertimeRequestRead.model_validate(row)
