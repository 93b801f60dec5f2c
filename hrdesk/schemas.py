"""Pydantic records exchanged with the persistence layer and the CLI."""
from datetime import date, datetime

from pydantic import BaseModel, Field


class LeaveTypeRead(BaseModel):
    """Catalog entry."""

    id: int
    name: str
    description: str = ""
    max_days_per_year: int = 0

    model_config = {"from_attributes": True}


class LeaveBalanceRead(BaseModel):
    """Balance row with its derived remaining days."""

    id: int
    employee_id: int
    leave_type_id: int
    year: int
    total_days: int | None = None
    used_days: int = 0
    carry_over_days: int = 0
    remaining_days: int | None = None

    model_config = {"from_attributes": True}


class LeaveRequestCreate(BaseModel):
    """Normalized leave request ready for insertion as Pending."""

    employee_id: int
    leave_type_id: int
    start_date: date
    end_date: date
    working_days: int = Field(ge=0)
    reason: str | None = None


class LeaveRequestRead(LeaveRequestCreate):
    """Stored leave request."""

    id: int
    status: str
    supervisor_notes: str | None = None
    created_at: datetime | None = None
    decided_at: datetime | None = None

    model_config = {"from_attributes": True}


class OvertimeRequestCreate(BaseModel):
    """Normalized overtime request; start/end carry the overtime date."""

    employee_id: int
    overtime_start: datetime
    overtime_end: datetime
    reason: str


class OvertimeRequestRead(OvertimeRequestCreate):
    """Stored overtime request."""

    id: int
    status: str
    hours: float
    supervisor_notes: str | None = None
    created_at: datetime | None = None
    decided_at: datetime | None = None

    model_config = {"from_attributes": True}


class LeaveSummary(BaseModel):
    """Per-year totals across every leave type of one employee."""

    employee_id: int
    year: int
    total_allocated_days: int = 0
    total_used_days: int = 0
    total_remaining_days: int = 0
    usage_percentage: float = 0.0
    balances: list[LeaveBalanceRead] = Field(default_factory=list)
