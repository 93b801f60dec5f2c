from .leave_service import LeaveService, LeaveSubmission
from .overtime_service import OvertimeService, OvertimeSubmission

__all__ = ["LeaveService", "LeaveSubmission", "OvertimeService", "OvertimeSubmission"]
