"""Tests for the overtime request workflow."""
from datetime import date, datetime, time

import pytest

from hrdesk.config import Settings
from hrdesk.core.clock import fixed_clock
from hrdesk.exceptions import InvalidStateError, RequestNotFoundError
from hrdesk.rules import ErrorCode
from hrdesk.services import OvertimeService


def test_submit_stores_pending_request(overtime_service) -> None:
    result = overtime_service.submit(7, date(2024, 6, 3), time(17, 0), time(19, 0), "Payroll cut-off prep")
    assert result.ok
    assert result.verdict.hours == 2.0
    saved = result.request
    assert saved.status == "Pending"
    assert saved.overtime_start == datetime(2024, 6, 3, 17, 0)
    assert saved.overtime_end == datetime(2024, 6, 3, 19, 0)
    assert saved.hours == 2.0


def test_form_strings_are_accepted(overtime_service) -> None:
    result = overtime_service.submit(7, "2024-06-05", "18:00", "21:30", "  Server migration window  ")
    assert result.ok
    assert result.request.hours == 3.5
    assert result.request.reason == "Server migration window"


def test_invalid_submission_reports_everything_and_stores_nothing(overtime_service) -> None:
    result = overtime_service.submit(7, date(2024, 5, 31), "19:00", "18:00", "Fix bug")
    assert not result.ok
    assert result.request is None
    assert result.verdict.codes == [
        ErrorCode.INVALID_OR_PAST_DATE, ErrorCode.END_NOT_AFTER_START, ErrorCode.REASON_TOO_SHORT,
    ]
    assert overtime_service.list_requests(7) == []


def test_approve_and_reject(overtime_service) -> None:
    a = overtime_service.submit(7, date(2024, 6, 3), time(17, 0), time(19, 0), "Inventory count").request
    b = overtime_service.submit(7, date(2024, 6, 4), time(17, 0), time(18, 0), "Inventory count").request

    approved = overtime_service.approve(a.id, "OK")
    rejected = overtime_service.reject(b.id, "Not needed")
    assert approved.status == "Approved" and approved.supervisor_notes == "OK"
    assert rejected.status == "Rejected"
    assert rejected.decided_at is not None

    with pytest.raises(InvalidStateError):
        overtime_service.reject(a.id)
    with pytest.raises(RequestNotFoundError):
        overtime_service.approve(12345)


def test_total_hours_counts_approved_only(overtime_service) -> None:
    ids = [
        overtime_service.submit(7, date(2024, 6, d), time(17, 0), time(19, 30), "Quarter-end close").request.id
        for d in (3, 4, 5)
    ]
    overtime_service.approve(ids[0])
    overtime_service.approve(ids[1])
    overtime_service.reject(ids[2])
    assert overtime_service.total_hours(7) == 5.0
    assert overtime_service.total_hours(7, date(2024, 6, 4), date(2024, 6, 30)) == 2.5
    assert overtime_service.total_hours(8) == 0


def test_list_requests_filters_by_status(overtime_service) -> None:
    a = overtime_service.submit(7, date(2024, 6, 3), time(17, 0), time(19, 0), "Inventory count").request
    overtime_service.submit(7, date(2024, 6, 4), time(17, 0), time(19, 0), "Inventory count")
    overtime_service.approve(a.id)
    assert [r.id for r in overtime_service.list_requests(7, status="Approved")] == [a.id]
    assert len(overtime_service.list_requests(7, status="Pending")) == 1


def test_overtime_shorter_than_minimum_is_refused(overtime_service) -> None:
    result = overtime_service.submit(7, date(2024, 6, 3), "17:00", "17:01", "Quick server restart")
    assert result.verdict.codes == [ErrorCode.OVERTIME_TOO_SHORT]
    assert result.verdict.messages == ["Minimum overtime duration is 30 minutes"]
    assert result.request is None
    assert overtime_service.list_requests(7) == []


def test_overtime_longer_than_daily_maximum_is_refused(overtime_service) -> None:
    result = overtime_service.submit(7, date(2024, 6, 3), "00:00", "23:59", "Data center migration")
    assert result.verdict.codes == [ErrorCode.OVERTIME_TOO_LONG]
    assert result.verdict.messages == ["Maximum daily overtime is 4 hours"]
    assert overtime_service.list_requests(7) == []


def test_limits_are_inclusive(overtime_service) -> None:
    assert overtime_service.submit(7, date(2024, 6, 3), "17:00", "17:30", "Quick server restart").ok
    assert overtime_service.submit(7, date(2024, 6, 4), "17:00", "21:00", "Quarter-end close").ok


def test_limits_come_from_settings(session_factory, db_url) -> None:
    settings = Settings(database_url=db_url, min_overtime_minutes=0, max_daily_overtime_hours=24)
    svc = OvertimeService(session_factory, settings, fixed_clock(date(2024, 6, 3)))
    assert svc.submit(7, date(2024, 6, 3), "17:00", "17:01", "Quick server restart").ok
    assert svc.submit(7, date(2024, 6, 4), "00:00", "23:59", "Data center migration").ok
