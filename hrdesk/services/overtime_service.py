"""Overtime request workflow."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from ..config import Settings, get_settings
from ..core.clock import Clock, zone_clock
from ..core.database import get_sessionmaker
from ..core.models import OvertimeRequest
from ..exceptions import InvalidStateError, RequestNotFoundError
from ..repository import SqlLeaveStore
from ..rules.errors import OvertimeVerdict
from ..rules.overtime import apply_overtime_limits, validate_overtime_request
from ..rules.types import OvertimeRequestDraft, RequestStatus
from ..schemas import OvertimeRequestCreate, OvertimeRequestRead

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OvertimeSubmission:
    verdict: OvertimeVerdict
    request: Optional[OvertimeRequestRead] = None

    @property
    def ok(self) -> bool:
        return self.verdict.ok


class OvertimeService:
    def __init__(self, session_factory: sessionmaker | None = None,
                 settings: Settings | None = None, clock: Clock | None = None):
        self.settings = settings or get_settings()
        self._sessions = session_factory or get_sessionmaker(self.settings.database_url)
        self._clock = clock or zone_clock(self.settings.tzinfo)

    def today(self) -> date:
        return self._clock()

    def submit(self, employee_id: int, day: date | str | None, start_time: time | str | None,
               end_time: time | str | None, reason: str | None) -> OvertimeSubmission:
        draft = OvertimeRequestDraft(employee_id=employee_id, date=day, start_time=start_time,
                                     end_time=end_time, reason=reason)
        verdict = apply_overtime_limits(
            validate_overtime_request(draft, self.today()),
            self.settings.min_overtime_minutes,
            self.settings.max_daily_overtime_hours,
        )
        if not verdict.ok:
            logger.info(f"Overtime request for employee {employee_id} refused: "
                        f"{', '.join(c.value for c in verdict.codes)}")
            return OvertimeSubmission(verdict)

        record = OvertimeRequestCreate(
            employee_id=employee_id,
            overtime_start=datetime.combine(verdict.overtime_date, verdict.start_time),
            overtime_end=datetime.combine(verdict.overtime_date, verdict.end_time),
            reason=verdict.reason,
        )
        with self._sessions.begin() as session:
            saved = SqlLeaveStore(session).insert_overtime_request(record)
        return OvertimeSubmission(verdict, saved)

    def _decide(self, request_id: int, status: RequestStatus, notes: str | None) -> OvertimeRequestRead:
        with self._sessions.begin() as session:
            store = SqlLeaveStore(session)
            row: OvertimeRequest | None = store.get_overtime_request(request_id)
            if row is None:
                raise RequestNotFoundError(f"Overtime request {request_id} not found")
            if row.status != RequestStatus.PENDING.value:
                raise InvalidStateError(f"Overtime request {request_id} is {row.status}, not Pending")
            result = store.set_overtime_status(row, status, notes)
        logger.info(f"Overtime request {request_id} {status.value.lower()} for employee {result.employee_id}.")
        return result

    def approve(self, request_id: int, notes: str | None = None) -> OvertimeRequestRead:
        return self._decide(request_id, RequestStatus.APPROVED, notes)

    def reject(self, request_id: int, notes: str | None = None) -> OvertimeRequestRead:
        return self._decide(request_id, RequestStatus.REJECTED, notes)

    def list_requests(self, employee_id: int | None = None, start: date | None = None,
                      end: date | None = None, status: str | None = None) -> List[OvertimeRequestRead]:
        with self._sessions() as session:
            return SqlLeaveStore(session).list_overtime_requests(employee_id, start, end, status)

    def total_hours(self, employee_id: int, start: date | None = None, end: date | None = None) -> float:
        """Approved overtime hours in the window."""
        rows = self.list_requests(employee_id, start, end, RequestStatus.APPROVED.value)
        return round(sum(r.hours for r in rows), 2)
