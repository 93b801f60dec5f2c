"""Pure business rules for leave and overtime requests."""
from .calendar import count_weekdays, is_weekend, next_weekday, previous_weekday, ranges_overlap
from .errors import ErrorCode, LeaveVerdict, OvertimeVerdict, ValidationError
from .leave import validate_leave_request
from .overtime import MIN_REASON_LENGTH, apply_overtime_limits, validate_overtime_request
from .types import (
    BalanceSnapshot, ExistingLeaveRequest, LeaveRequestDraft, LeaveTypeEntry,
    OvertimeRequestDraft, RequestStatus,
)

__all__ = [
    "BalanceSnapshot", "ErrorCode", "ExistingLeaveRequest", "LeaveRequestDraft", "LeaveTypeEntry",
    "LeaveVerdict", "MIN_REASON_LENGTH", "OvertimeRequestDraft", "OvertimeVerdict", "RequestStatus",
    "ValidationError", "apply_overtime_limits", "count_weekdays", "is_weekend", "next_weekday",
    "previous_weekday", "ranges_overlap", "validate_leave_request", "validate_overtime_request",
]
