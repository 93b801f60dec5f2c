"""Tests for the leave request workflow."""
from datetime import date

import pytest

from hrdesk.core.clock import fixed_clock
from hrdesk.exceptions import InsufficientBalanceError, InvalidStateError, RequestNotFoundError
from hrdesk.rules import ErrorCode
from hrdesk.services import LeaveService

EMPLOYEE = 7


def _vacation_balance(svc: LeaveService, employee_id: int = EMPLOYEE, year: int = 2024):
    return next(b for b in svc.balances(employee_id, year) if b.leave_type_id == _vacation_id(svc))


def _vacation_id(svc: LeaveService) -> int:
    return next(lt.id for lt in svc.leave_types() if lt.name == "Vacation Leave")


def test_submit_stores_pending_request(leave_service, funded_employee) -> None:
    result = leave_service.submit(funded_employee, "Vacation Leave", date(2024, 6, 10), date(2024, 6, 14),
                                  "Family trip")
    assert result.ok
    assert result.verdict.working_days == 5
    assert result.request.status == "Pending"
    assert result.request.reason == "Family trip"
    # nothing is debited until approval
    assert _vacation_balance(leave_service).remaining_days == 15


def test_submit_accepts_type_id(leave_service, funded_employee, leave_type_ids) -> None:
    result = leave_service.submit(funded_employee, leave_type_ids["Sick Leave"], date(2024, 6, 4), date(2024, 6, 4))
    assert result.ok
    assert result.request.reason is None


def test_refused_submission_is_not_stored(leave_service, funded_employee) -> None:
    result = leave_service.submit(funded_employee, "Vacation Leave", date(2024, 6, 8), date(2024, 6, 12))
    assert not result.ok
    assert result.request is None
    assert result.verdict.error.code is ErrorCode.WEEKEND_START
    assert leave_service.list_requests(funded_employee) == []


def test_unknown_type_name(leave_service, funded_employee) -> None:
    result = leave_service.submit(funded_employee, "Maternity Leave", date(2024, 6, 10), date(2024, 6, 10))
    assert result.verdict.error.code is ErrorCode.UNKNOWN_LEAVE_TYPE


def test_balance_year_follows_start_date(leave_service, funded_employee) -> None:
    result = leave_service.submit(funded_employee, "Vacation Leave", date(2025, 1, 6), date(2025, 1, 7))
    assert result.verdict.error.code is ErrorCode.NO_BALANCE_ON_FILE
    assert result.verdict.error.params["year"] == 2025


def test_pending_request_blocks_until_rejected(leave_service, funded_employee) -> None:
    first = leave_service.submit(funded_employee, "Vacation Leave", date(2024, 6, 10), date(2024, 6, 12))
    clash = leave_service.submit(funded_employee, "Sick Leave", date(2024, 6, 12), date(2024, 6, 13))
    assert clash.verdict.error.code is ErrorCode.OVERLAPPING_REQUEST
    assert clash.verdict.error.params["request_id"] == first.request.id

    leave_service.reject(first.request.id, "Team offsite that week")
    assert leave_service.submit(funded_employee, "Sick Leave", date(2024, 6, 12), date(2024, 6, 13)).ok


def test_approve_debits_balance(leave_service, funded_employee) -> None:
    req = leave_service.submit(funded_employee, "Vacation Leave", date(2024, 6, 10), date(2024, 6, 14)).request
    approved = leave_service.approve(req.id, "Enjoy")
    assert approved.status == "Approved"
    assert approved.supervisor_notes == "Enjoy"
    assert approved.decided_at is not None
    assert _vacation_balance(leave_service).remaining_days == 10


def test_only_pending_requests_can_be_decided(leave_service, funded_employee) -> None:
    req = leave_service.submit(funded_employee, "Vacation Leave", date(2024, 6, 10), date(2024, 6, 10)).request
    leave_service.approve(req.id)
    with pytest.raises(InvalidStateError):
        leave_service.approve(req.id)
    with pytest.raises(InvalidStateError):
        leave_service.reject(req.id)
    with pytest.raises(RequestNotFoundError):
        leave_service.approve(9999)


def test_approval_rechecks_balance(leave_service) -> None:
    """Two requests that each fit can't both be approved once the first drains the balance."""

    leave_service.initialize_balances(8, 2024, total_days=5)
    a = leave_service.submit(8, "Vacation Leave", date(2024, 6, 10), date(2024, 6, 12)).request
    b = leave_service.submit(8, "Vacation Leave", date(2024, 6, 17), date(2024, 6, 19)).request
    leave_service.approve(a.id)

    with pytest.raises(InsufficientBalanceError) as exc:
        leave_service.approve(b.id)
    assert exc.value.requested == 3
    assert exc.value.available == 2
    assert _vacation_balance(leave_service, 8).remaining_days == 2
    assert leave_service.list_requests(8, status="Pending")[0].id == b.id


def test_cancel_pending_request_deletes_it(leave_service, funded_employee) -> None:
    req = leave_service.submit(funded_employee, "Vacation Leave", date(2024, 6, 10), date(2024, 6, 11)).request
    leave_service.cancel(req.id, funded_employee)
    assert leave_service.list_requests(funded_employee) == []


def test_cancel_approved_future_request_restores_balance(leave_service, funded_employee) -> None:
    req = leave_service.submit(funded_employee, "Vacation Leave", date(2024, 6, 10), date(2024, 6, 14)).request
    leave_service.approve(req.id)
    leave_service.cancel(req.id, funded_employee)
    assert _vacation_balance(leave_service).remaining_days == 15
    assert leave_service.list_requests(funded_employee) == []


def test_cancel_rules(leave_service, funded_employee, session_factory, settings) -> None:
    req = leave_service.submit(funded_employee, "Vacation Leave", date(2024, 6, 10), date(2024, 6, 14)).request
    leave_service.approve(req.id)

    with pytest.raises(InvalidStateError):
        leave_service.cancel(req.id, 99)

    later = LeaveService(session_factory, settings, fixed_clock(date(2024, 6, 10)))
    with pytest.raises(InvalidStateError):
        later.cancel(req.id, funded_employee)

    rejected = leave_service.submit(funded_employee, "Sick Leave", date(2024, 6, 17), date(2024, 6, 17)).request
    leave_service.reject(rejected.id)
    with pytest.raises(InvalidStateError):
        leave_service.cancel(rejected.id, funded_employee)


def test_summary_totals(leave_service, funded_employee) -> None:
    req = leave_service.submit(funded_employee, "Vacation Leave", date(2024, 6, 10), date(2024, 6, 14)).request
    leave_service.approve(req.id)
    s = leave_service.summary(funded_employee, 2024)
    assert s.total_allocated_days == 30
    assert s.total_used_days == 5
    assert s.total_remaining_days == 25
    assert s.usage_percentage == 16.67
    assert len(s.balances) == 2


def test_summary_without_balances(leave_service) -> None:
    s = leave_service.summary(42, 2024)
    assert s.total_allocated_days == 0
    assert s.usage_percentage == 0.0


def test_carry_over_is_capped(leave_service, funded_employee) -> None:
    req = leave_service.submit(funded_employee, "Vacation Leave", date(2024, 6, 10), date(2024, 6, 14)).request
    leave_service.approve(req.id)

    created = leave_service.carry_over(2024)
    assert len(created) == 2
    assert {b.carry_over_days for b in created} == {5}
    assert {b.remaining_days for b in created} == {20}
    assert leave_service.carry_over(2024) == []


def test_carry_over_with_explicit_cap(leave_service, funded_employee) -> None:
    req = leave_service.submit(funded_employee, "Vacation Leave", date(2024, 6, 10), date(2024, 6, 14)).request
    leave_service.approve(req.id)
    created = {b.leave_type_id: b for b in leave_service.carry_over(2024, max_carry_over_days=20)}
    assert created[_vacation_id(leave_service)].carry_over_days == 10
    assert {b.carry_over_days for b in created.values()} == {10, 15}
