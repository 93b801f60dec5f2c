"""XLSX export of leave and overtime request history."""
from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Mapping

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from ..schemas import LeaveRequestRead, OvertimeRequestRead

LEAVE_HEADERS = [
    "Request ID", "Employee ID", "Leave Type", "Start", "End", "Working Days",
    "Status", "Reason", "Supervisor Notes", "Date Submitted",
]
OVERTIME_HEADERS = [
    "Request ID", "Employee ID", "Date", "Start Time", "End Time", "Hours",
    "Status", "Reason", "Supervisor Notes", "Date Submitted",
]


def _fmt_date(d: date | None) -> str:
    return d.isoformat() if d else ""


def _fmt_stamp(dt: datetime | None) -> str:
    return dt.strftime("%Y-%m-%d %H:%M") if dt else ""


def _autosize(ws) -> None:
    for idx, column in enumerate(ws.columns, start=1):
        width = max((len(str(c.value)) for c in column if c.value is not None), default=8)
        ws.column_dimensions[get_column_letter(idx)].width = min(60, width + 2)


def export_leave_requests(requests: Iterable[LeaveRequestRead], path: str | Path,
                          type_names: Mapping[int, str] | None = None) -> Path:
    type_names = type_names or {}
    wb = Workbook()
    ws = wb.active
    ws.title = "Leave Requests"
    ws.append(LEAVE_HEADERS)
    for r in requests:
        ws.append([
            r.id, r.employee_id, type_names.get(r.leave_type_id, str(r.leave_type_id)),
            _fmt_date(r.start_date), _fmt_date(r.end_date), r.working_days,
            r.status, r.reason or "", r.supervisor_notes or "", _fmt_stamp(r.created_at),
        ])
    ws.freeze_panes = "A2"
    _autosize(ws)
    path = Path(path)
    wb.save(path)
    return path


def export_overtime_requests(requests: Iterable[OvertimeRequestRead], path: str | Path) -> Path:
    wb = Workbook()
    ws = wb.active
    ws.title = "Overtime Requests"
    ws.append(OVERTIME_HEADERS)
    for r in requests:
        ws.append([
            r.id, r.employee_id, _fmt_date(r.overtime_start.date()),
            r.overtime_start.strftime("%H:%M"), r.overtime_end.strftime("%H:%M"), round(r.hours, 2),
            r.status, r.reason, r.supervisor_notes or "", _fmt_stamp(r.created_at),
        ])
    ws.freeze_panes = "A2"
    _autosize(ws)
    path = Path(path)
    wb.save(path)
    return path
