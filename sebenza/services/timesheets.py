"""
Timesheet workflow: status transitions and the weekly view.

A timesheet row only stores its header (employee, week, status, approval
fields). The entries and hour totals shown with it are a projection over the
live time entries, rebuilt on every read and every status update. An approved
timesheet therefore still reflects later edits to its week's entries.
"""
import enum
import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy.orm import Session

from sebenza.models.time_entry import TimeEntry
from sebenza.models.timesheet import Timesheet
from sebenza.services.time_tracking import calculate_billable_hours, calculate_total_hours, round_hours

logger = logging.getLogger(__name__)


class TimesheetStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


ALLOWED_TRANSITIONS: dict[TimesheetStatus, frozenset[TimesheetStatus]] = {
    TimesheetStatus.DRAFT: frozenset({TimesheetStatus.SUBMITTED}),
    TimesheetStatus.SUBMITTED: frozenset({
        TimesheetStatus.APPROVED,
        TimesheetStatus.REJECTED,
        TimesheetStatus.DRAFT,
    }),
    TimesheetStatus.REJECTED: frozenset({TimesheetStatus.SUBMITTED, TimesheetStatus.DRAFT}),
    TimesheetStatus.APPROVED: frozenset(),
}


class InvalidStatusTransition(Exception):
    def __init__(self, current: TimesheetStatus, target: TimesheetStatus):
        self.current = current
        self.target = target
        if current is TimesheetStatus.APPROVED:
            message = "Cannot change status of approved timesheet"
        else:
            message = f"Cannot move timesheet from {current.value} to {target.value}"
        super().__init__(message)


def allowed_next_states(status) -> list[str]:
    """Statuses reachable from ``status``, sorted for stable output."""
    return sorted(s.value for s in ALLOWED_TRANSITIONS[TimesheetStatus(status)])


def validate_transition(current, target) -> TimesheetStatus:
    """Return the target status, or raise InvalidStatusTransition.

    Saving the current status again (e.g. to edit comments) is always allowed.
    """
    current, target = TimesheetStatus(current), TimesheetStatus(target)
    if current is target or target in ALLOWED_TRANSITIONS[current]:
        return target
    raise InvalidStatusTransition(current, target)


# ── Weekly view ──


@dataclass
class TimesheetView:
    timesheet: Timesheet
    time_entries: list = field(default_factory=list)
    total_hours: float = 0.0
    billable_hours: float = 0.0
    allowed_transitions: list[str] = field(default_factory=list)


def load_week_entries(db: Session, employee_id: str, week_start: date, week_end: date) -> list[TimeEntry]:
    """Closed time entries of one employee dated inside the week (inclusive)."""
    return (
        db.query(TimeEntry)
        .filter(
            TimeEntry.employee_id == employee_id,
            TimeEntry.date >= week_start,
            TimeEntry.date <= week_end,
            TimeEntry.is_active.is_(False),
        )
        .order_by(TimeEntry.date, TimeEntry.start_time)
        .all()
    )


def build_timesheet_view(timesheet: Timesheet, entries: list) -> TimesheetView:
    return TimesheetView(
        timesheet=timesheet,
        time_entries=list(entries),
        total_hours=round_hours(calculate_total_hours(entries)),
        billable_hours=round_hours(calculate_billable_hours(entries)),
        allowed_transitions=allowed_next_states(timesheet.status),
    )


def refresh_timesheet(db: Session, timesheet: Timesheet) -> TimesheetView:
    entries = load_week_entries(db, timesheet.employee_id, timesheet.week_start_date, timesheet.week_end_date)
    view = build_timesheet_view(timesheet, entries)
    logger.debug("Timesheet %s refreshed: %d entries, %.2f h", timesheet.id, len(entries), view.total_hours)
    return view
