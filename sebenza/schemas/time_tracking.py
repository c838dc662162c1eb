from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import Optional, List
from datetime import date as date_type, datetime
from decimal import Decimal

from sebenza.services.time_tracking import format_duration


# ── Time entries ──


class TimeEntryCreate(BaseModel):
    # Required fields are checked by validate_time_entry so every missing one is reported
    employee_id: Optional[str] = None
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, ge=0)  # minutes
    date: Optional[date_type] = None
    billable: bool = True
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    tags: Optional[List[str]] = None


class TimeEntryUpdate(BaseModel):
    employee_id: Optional[str] = None
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, ge=0)
    date: Optional[date_type] = None
    billable: Optional[bool] = None
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    tags: Optional[List[str]] = None


class TimeEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    project_id: str
    task_id: Optional[str] = None
    description: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[int] = None
    date: date_type
    is_active: bool
    billable: bool
    hourly_rate: Optional[float] = None
    tags: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def duration_display(self) -> Optional[str]:
        return format_duration(self.duration) if self.duration is not None else None


class TimerStart(BaseModel):
    employee_id: Optional[str] = None
    project_id: Optional[str] = None
    task_id: Optional[str] = None
    description: Optional[str] = None
    billable: bool = True


class TimerStop(BaseModel):
    employee_id: Optional[str] = None
    time_entry_id: Optional[str] = None


# ── Timesheets ──


class TimesheetCreate(BaseModel):
    employee_id: Optional[str] = None
    week_start_date: Optional[date_type] = None
    week_end_date: Optional[date_type] = None  # defaults to the Sunday after week_start_date


class TimesheetUpdate(BaseModel):
    status: Optional[str] = None
    comments: Optional[str] = None


class TimesheetResponse(BaseModel):
    id: str
    employee_id: str
    week_start_date: date_type
    week_end_date: date_type
    status: str
    total_hours: float
    billable_hours: float
    time_entries: List[TimeEntryResponse] = []
    allowed_transitions: List[str] = []
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    comments: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WeekBounds(BaseModel):
    week_start_date: str
    week_end_date: str
