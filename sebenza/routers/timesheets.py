"""
Timesheets router — weekly roll-ups of an employee's closed time entries.

Totals and entries are recomputed from the live time entries on every read
and update (see services.timesheets). Static routes come before /{timesheet_id}.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sebenza.database import get_db
from sebenza.dependencies import CurrentUser, get_current_user
from sebenza.models.timesheet import Timesheet
from sebenza.schemas.time_tracking import (
    TimeEntryResponse,
    TimesheetCreate,
    TimesheetUpdate,
    TimesheetResponse,
    WeekBounds,
)
from sebenza.services.audit import log_action
from sebenza.services.time_tracking import generate_timesheet_id, get_week_end_date, get_week_start_date
from sebenza.services.timesheets import (
    InvalidStatusTransition,
    TimesheetStatus,
    TimesheetView,
    refresh_timesheet,
    validate_transition,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/timesheets", tags=["Timesheets"])

VALID_STATUSES = [s.value for s in TimesheetStatus]
_REVIEW_STATUSES = {TimesheetStatus.APPROVED, TimesheetStatus.REJECTED}


# ──────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _to_response(view: TimesheetView) -> TimesheetResponse:
    ts = view.timesheet
    return TimesheetResponse(
        id=ts.id,
        employee_id=ts.employee_id,
        week_start_date=ts.week_start_date,
        week_end_date=ts.week_end_date,
        status=ts.status,
        total_hours=view.total_hours,
        billable_hours=view.billable_hours,
        time_entries=[TimeEntryResponse.model_validate(e) for e in view.time_entries],
        allowed_transitions=view.allowed_transitions,
        submitted_at=ts.submitted_at,
        approved_at=ts.approved_at,
        approved_by=ts.approved_by,
        comments=ts.comments,
        created_at=ts.created_at,
        updated_at=ts.updated_at,
    )


def _get_timesheet_or_404(db: Session, timesheet_id: str) -> Timesheet:
    ts = db.query(Timesheet).filter(Timesheet.id == timesheet_id).first()
    if not ts:
        raise HTTPException(status_code=404, detail="Timesheet not found")
    return ts


# ══════════════════════════════════════════════
# STATIC ROUTES — before /{timesheet_id}
# ══════════════════════════════════════════════

@router.get("/week", response_model=WeekBounds)
def week_bounds(
    d: date = Query(..., alias="date"),
    user: CurrentUser = Depends(get_current_user),
):
    """Monday..Sunday bounds of the week containing ``date``."""
    return WeekBounds(week_start_date=get_week_start_date(d), week_end_date=get_week_end_date(d))


# ── CRUD ──

@router.get("/", response_model=list[TimesheetResponse])
def list_timesheets(
    employee_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    week_start: Optional[date] = Query(None),
    week_end: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    q = db.query(Timesheet)
    if employee_id:
        q = q.filter(Timesheet.employee_id == employee_id)
    if status:
        q = q.filter(Timesheet.status == status)
    if week_start and week_end:
        q = q.filter(Timesheet.week_start_date >= week_start, Timesheet.week_end_date <= week_end)
    sheets = q.order_by(Timesheet.week_start_date.desc()).all()
    return [_to_response(refresh_timesheet(db, ts)) for ts in sheets]


@router.post("/", response_model=TimesheetResponse, status_code=201)
def create_timesheet(
    body: TimesheetCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    if not body.employee_id or not body.week_start_date:
        raise HTTPException(status_code=400, detail="Employee ID and week start date are required")

    week_start = body.week_start_date
    week_end = body.week_end_date or week_start + timedelta(days=6)
    if week_end < week_start:
        raise HTTPException(status_code=400, detail="Week end date must not be before week start date")

    existing = db.query(Timesheet).filter(
        Timesheet.employee_id == body.employee_id,
        Timesheet.week_start_date == week_start,
        Timesheet.week_end_date == week_end,
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail="Timesheet already exists for this week")

    ts = Timesheet(
        id=generate_timesheet_id(),
        employee_id=body.employee_id,
        week_start_date=week_start,
        week_end_date=week_end,
        status=TimesheetStatus.DRAFT.value,
    )
    db.add(ts)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Timesheet already exists for this week")
    db.refresh(ts)
    logger.info("Timesheet %s created for %s (%s..%s)", ts.id, ts.employee_id, week_start, week_end)
    return _to_response(refresh_timesheet(db, ts))


@router.get("/{timesheet_id}", response_model=TimesheetResponse)
def get_timesheet(
    timesheet_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return _to_response(refresh_timesheet(db, _get_timesheet_or_404(db, timesheet_id)))


@router.put("/{timesheet_id}", response_model=TimesheetResponse)
def update_timesheet(
    timesheet_id: str,
    body: TimesheetUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    ts = _get_timesheet_or_404(db, timesheet_id)

    if not body.status:
        raise HTTPException(status_code=400, detail="Status is required")
    if body.status not in VALID_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    current = TimesheetStatus(ts.status)
    try:
        target = validate_transition(current, body.status)
    except InvalidStatusTransition as e:
        logger.warning("Timesheet %s: %s", ts.id, e)
        raise HTTPException(status_code=400, detail=str(e))

    if target is not current and target in _REVIEW_STATUSES and not user.is_admin:
        raise HTTPException(status_code=403, detail="Only admins can approve or reject timesheets")

    now = _now_utc()
    if target is TimesheetStatus.SUBMITTED and current is not TimesheetStatus.SUBMITTED:
        ts.submitted_at = now
    if target is TimesheetStatus.APPROVED and current is not TimesheetStatus.APPROVED:
        ts.approved_at = now
        ts.approved_by = user.id

    ts.status = target.value
    if body.comments is not None:
        ts.comments = body.comments

    if target is not current:
        log_action(
            db, user.id, f"timesheet_{target.value}", "timesheet", ts.id,
            details={"from": current.value, "to": target.value},
            commit=False,
        )
        logger.info("Timesheet %s: %s -> %s by %s", ts.id, current.value, target.value, user.id)
    db.commit()
    db.refresh(ts)
    return _to_response(refresh_timesheet(db, ts))


@router.delete("/{timesheet_id}")
def delete_timesheet(
    timesheet_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    ts = _get_timesheet_or_404(db, timesheet_id)
    if ts.status in (TimesheetStatus.SUBMITTED.value, TimesheetStatus.APPROVED.value):
        raise HTTPException(status_code=400, detail="Cannot delete submitted or approved timesheet")
    db.delete(ts)
    db.commit()
    logger.info("Timesheet %s deleted by %s", timesheet_id, user.id)
    return {"ok": True, "id": timesheet_id}
