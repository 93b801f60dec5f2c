"""
Leave request workflow: submission, approval, rejection, cancellation,
balance initialization, year-end carry-over and per-year summaries.

Each public method runs in its own transaction. Validation itself is pure
(``hrdesk.rules.leave``); this layer fetches the snapshots it needs and
persists the outcome.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from ..config import Settings, get_settings
from ..core.clock import Clock, zone_clock
from ..core.database import get_sessionmaker
from ..core.models import LeaveRequest
from ..exceptions import InsufficientBalanceError, InvalidStateError, RequestNotFoundError
from ..repository import SqlLeaveStore
from ..rules.errors import LeaveVerdict
from ..rules.leave import validate_leave_request
from ..rules.types import LeaveRequestDraft, RequestStatus
from ..schemas import LeaveBalanceRead, LeaveRequestCreate, LeaveRequestRead, LeaveSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveSubmission:
    verdict: LeaveVerdict
    request: Optional[LeaveRequestRead] = None

    @property
    def ok(self) -> bool:
        return self.verdict.ok


def _require(store: SqlLeaveStore, request_id: int) -> LeaveRequest:
    row = store.get_leave_request(request_id)
    if row is None:
        raise RequestNotFoundError(f"Leave request {request_id} not found")
    return row


class LeaveService:
    def __init__(self, session_factory: sessionmaker | None = None,
                 settings: Settings | None = None, clock: Clock | None = None):
        self.settings = settings or get_settings()
        self._sessions = session_factory or get_sessionmaker(self.settings.database_url)
        self._clock = clock or zone_clock(self.settings.tzinfo)

    def today(self) -> date:
        return self._clock()

    # ----- setup -----
    def setup_leave_types(self) -> list:
        with self._sessions.begin() as session:
            return SqlLeaveStore(session).ensure_default_leave_types(self.settings.default_leave_days)

    def leave_types(self) -> list:
        with self._sessions() as session:
            return SqlLeaveStore(session).get_leave_types()

    def initialize_balances(self, employee_id: int, year: int | None = None,
                            total_days: int | None = None) -> List[LeaveBalanceRead]:
        year = year or self.today().year
        with self._sessions.begin() as session:
            return SqlLeaveStore(session).ensure_leave_balances(employee_id, year, total_days)

    # ----- submission -----
    def submit(self, employee_id: int, leave_type: int | str | None, start: date | None,
               end: date | None, reason: str | None = None) -> LeaveSubmission:
        """Validate a leave application and store it as Pending when admissible."""
        reason = (reason or "").strip() or None
        with self._sessions.begin() as session:
            store = SqlLeaveStore(session)
            leave_types = store.get_leave_types()
            if isinstance(leave_type, str):
                entry = store.get_leave_type_by_name(leave_type)
                leave_type_id = entry.id if entry else None
            else:
                leave_type_id = leave_type

            draft = LeaveRequestDraft(employee_id=employee_id, leave_type_id=leave_type_id,
                                      start_date=start, end_date=end, reason=reason)
            balance = None
            existing = []
            if (leave_type_id is not None and isinstance(start, date) and isinstance(end, date)
                    and start <= end):
                balance = store.get_leave_balance(employee_id, leave_type_id, start.year)
                existing = store.get_overlapping_requests(employee_id, start, end)

            verdict = validate_leave_request(draft, balance, existing, self.today(), leave_types)
            if not verdict.ok:
                logger.info(f"Leave request for employee {employee_id} refused: {verdict.error.code.value}")
                return LeaveSubmission(verdict)

            saved = store.insert_leave_request(LeaveRequestCreate(
                employee_id=employee_id,
                leave_type_id=leave_type_id,
                start_date=start,
                end_date=end,
                working_days=verdict.working_days,
                reason=reason,
            ))
            return LeaveSubmission(verdict, saved)

    # ----- approval workflow -----
    def approve(self, request_id: int, notes: str | None = None) -> LeaveRequestRead:
        """Approve a Pending request and debit its working days from the balance."""
        with self._sessions.begin() as session:
            store = SqlLeaveStore(session)
            row = _require(store, request_id)
            if row.status != RequestStatus.PENDING.value:
                raise InvalidStateError(f"Leave request {request_id} is {row.status}, not Pending")

            balance = store.get_balance_row(row.employee_id, row.leave_type_id, row.start_date.year, lock=True)
            available = balance.remaining_days if balance is not None else None
            if available is None or available < row.working_days:
                raise InsufficientBalanceError(row.working_days, available or 0)

            store.adjust_used_days(balance, row.working_days)
            result = store.set_leave_status(row, RequestStatus.APPROVED, notes)
        logger.info(f"Leave request {request_id} approved; {result.working_days} day(s) debited "
                    f"for employee {result.employee_id}.")
        return result

    def reject(self, request_id: int, notes: str | None = None) -> LeaveRequestRead:
        with self._sessions.begin() as session:
            store = SqlLeaveStore(session)
            row = _require(store, request_id)
            if row.status != RequestStatus.PENDING.value:
                raise InvalidStateError(f"Leave request {request_id} is {row.status}, not Pending")
            result = store.set_leave_status(row, RequestStatus.REJECTED, notes)
        logger.info(f"Leave request {request_id} rejected for employee {result.employee_id}.")
        return result

    def cancel(self, request_id: int, employee_id: int) -> None:
        """Withdraw a request; an approved one is only cancellable before it starts."""
        with self._sessions.begin() as session:
            store = SqlLeaveStore(session)
            row = _require(store, request_id)
            if row.employee_id != employee_id:
                raise InvalidStateError(f"Leave request {request_id} does not belong to employee {employee_id}")
            if row.status == RequestStatus.APPROVED.value:
                if row.start_date <= self.today():
                    raise InvalidStateError(f"Leave request {request_id} has already started")
                balance = store.get_balance_row(row.employee_id, row.leave_type_id,
                                                row.start_date.year, lock=True)
                if balance is not None:
                    store.adjust_used_days(balance, -row.working_days)
            elif row.status != RequestStatus.PENDING.value:
                raise InvalidStateError(f"Leave request {request_id} is {row.status} and cannot be cancelled")
            store.delete_leave_request(row)
        logger.info(f"Leave request {request_id} cancelled by employee {employee_id}.")

    # ----- queries -----
    def list_requests(self, employee_id: int | None = None, start: date | None = None,
                      end: date | None = None, status: str | None = None) -> List[LeaveRequestRead]:
        with self._sessions() as session:
            return SqlLeaveStore(session).list_leave_requests(employee_id, start, end, status)

    def balances(self, employee_id: int, year: int | None = None) -> List[LeaveBalanceRead]:
        year = year or self.today().year
        with self._sessions() as session:
            rows = SqlLeaveStore(session).list_balances(employee_id, year)
            return [LeaveBalanceRead.model_validate(r) for r in rows]

    def summary(self, employee_id: int, year: int | None = None) -> LeaveSummary:
        balances = self.balances(employee_id, year)
        allocated = sum(b.total_days or 0 for b in balances)
        used = sum(b.used_days or 0 for b in balances)
        remaining = sum(b.remaining_days or 0 for b in balances)
        usage = round(used / allocated * 100.0, 2) if allocated > 0 else 0.0
        return LeaveSummary(
            employee_id=employee_id,
            year=year or self.today().year,
            total_allocated_days=allocated,
            total_used_days=used,
            total_remaining_days=remaining,
            usage_percentage=usage,
            balances=balances,
        )

    # ----- year end -----
    def carry_over(self, from_year: int, max_carry_over_days: int | None = None) -> List[LeaveBalanceRead]:
        """Open ``from_year + 1`` balances, carrying at most ``max_carry_over_days`` unused days."""
        cap = self.settings.max_carry_over_days if max_carry_over_days is None else max_carry_over_days
        created: List[LeaveBalanceRead] = []
        with self._sessions.begin() as session:
            store = SqlLeaveStore(session)
            for old in store.list_balances(year=from_year):
                if store.get_balance_row(old.employee_id, old.leave_type_id, from_year + 1) is not None:
                    continue
                carry = min(old.remaining_days or 0, max(0, cap))
                row = store.create_balance(old.employee_id, old.leave_type_id, from_year + 1,
                                           old.total_days, carry_over_days=carry)
                created.append(LeaveBalanceRead.model_validate(row))
        logger.info(f"Carried {len(created)} balance(s) from {from_year} into {from_year + 1} (cap {cap}).")
        return created
