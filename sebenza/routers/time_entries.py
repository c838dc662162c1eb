"""
Time entries router — manual entries plus start/stop timers.

Static routes (/start-timer, /stop-timer) are declared before /{entry_id}.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy.orm import Session

from sebenza.database import get_db
from sebenza.dependencies import CurrentUser, get_current_user
from sebenza.models.time_entry import TimeEntry
from sebenza.schemas.time_tracking import (
    TimeEntryCreate,
    TimeEntryUpdate,
    TimeEntryResponse,
    TimerStart,
    TimerStop,
)
from sebenza.services.time_tracking import (
    calculate_duration,
    check_time_overlap,
    generate_time_entry_id,
    parse_timestamp,
    validate_time_entry,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/time-entries", tags=["Time Tracking"])

_EDITABLE_FIELDS = (
    "employee_id", "project_id", "task_id", "description", "start_time", "end_time",
    "duration", "date", "billable", "hourly_rate", "tags",
)


# ──────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    return parse_timestamp(value).astimezone(timezone.utc) if value is not None else None


def _get_entry_or_404(db: Session, entry_id: str) -> TimeEntry:
    entry = db.query(TimeEntry).filter(TimeEntry.id == entry_id).first()
    if not entry:
        raise HTTPException(status_code=404, detail="Time entry not found")
    return entry


def _active_timer(db: Session, employee_id: str, exclude_id: Optional[str] = None) -> Optional[TimeEntry]:
    q = db.query(TimeEntry).filter(TimeEntry.employee_id == employee_id, TimeEntry.is_active.is_(True))
    if exclude_id:
        q = q.filter(TimeEntry.id != exclude_id)
    return q.first()


def _require_valid(data: dict) -> None:
    result = validate_time_entry(data)
    if not result.valid:
        raise HTTPException(status_code=400, detail={"message": "Validation failed", "errors": result.errors})


def _require_no_overlap(db: Session, data: dict) -> None:
    existing = db.query(TimeEntry).filter(
        TimeEntry.employee_id == data["employee_id"],
        TimeEntry.end_time.isnot(None),
    ).all()
    overlap = check_time_overlap(data, existing)
    if overlap.has_overlap:
        conflicts = [e.id for e in overlap.conflicting_entries]
        logger.warning("Rejected overlapping time entry for %s: conflicts=%s", data["employee_id"], conflicts)
        raise HTTPException(
            status_code=409,
            detail={"message": "Time entry overlaps with existing entries", "conflicting_entry_ids": conflicts},
        )


# ══════════════════════════════════════════════
# STATIC ROUTES — before /{entry_id}
# ══════════════════════════════════════════════

@router.post("/start-timer", response_model=TimeEntryResponse, status_code=201)
def start_timer(
    body: TimerStart,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    if not body.employee_id or not body.project_id or not body.description:
        raise HTTPException(status_code=400, detail="Employee ID, Project ID, and description are required")

    if _active_timer(db, body.employee_id):
        raise HTTPException(status_code=409, detail="User already has an active timer running")

    now = _now_utc()
    entry = TimeEntry(
        id=generate_time_entry_id(),
        employee_id=body.employee_id,
        project_id=body.project_id,
        task_id=body.task_id,
        description=body.description,
        start_time=now,
        end_time=None,
        duration=None,
        date=now.date(),
        is_active=True,
        billable=body.billable,
        tags=[],
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.info("Timer %s started for employee %s", entry.id, entry.employee_id)
    return entry


@router.post("/stop-timer", response_model=TimeEntryResponse)
def stop_timer(
    body: TimerStop,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    if not body.employee_id and not body.time_entry_id:
        raise HTTPException(status_code=400, detail="Either Employee ID or Time Entry ID is required")

    q = db.query(TimeEntry).filter(TimeEntry.is_active.is_(True))
    if body.time_entry_id:
        q = q.filter(TimeEntry.id == body.time_entry_id)
    else:
        q = q.filter(TimeEntry.employee_id == body.employee_id)
    entry = q.first()
    if not entry:
        raise HTTPException(status_code=404, detail="No active timer found")

    end_time = _now_utc()
    entry.end_time = end_time
    entry.duration = calculate_duration(entry.start_time, end_time)
    entry.is_active = False
    db.commit()
    db.refresh(entry)
    logger.info("Timer %s stopped after %s min", entry.id, entry.duration)
    return entry


# ── CRUD ──

@router.get("/", response_model=list[TimeEntryResponse])
def list_entries(
    employee_id: Optional[str] = Query(None),
    project_id: Optional[str] = Query(None),
    entry_date: Optional[date] = Query(None, alias="date"),
    is_active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    q = db.query(TimeEntry)
    if employee_id:
        q = q.filter(TimeEntry.employee_id == employee_id)
    if project_id:
        q = q.filter(TimeEntry.project_id == project_id)
    if entry_date:
        q = q.filter(TimeEntry.date == entry_date)
    if is_active is not None:
        q = q.filter(TimeEntry.is_active.is_(is_active))
    return q.order_by(TimeEntry.date.desc(), TimeEntry.start_time.desc()).all()


@router.post("/", response_model=TimeEntryResponse, status_code=201)
def create_entry(
    body: TimeEntryCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    data = body.model_dump()
    _require_valid(data)

    # an entry without an end time is a running timer
    is_active = body.end_time is None
    if is_active and _active_timer(db, body.employee_id):
        raise HTTPException(status_code=409, detail="User already has an active timer running")
    _require_no_overlap(db, data)

    duration = body.duration
    if not duration and body.start_time and body.end_time:
        duration = calculate_duration(body.start_time, body.end_time)

    entry = TimeEntry(
        id=generate_time_entry_id(),
        employee_id=body.employee_id,
        project_id=body.project_id,
        task_id=body.task_id,
        description=body.description,
        start_time=_utc(body.start_time),
        end_time=_utc(body.end_time),
        duration=duration,
        date=body.date,
        is_active=is_active,
        billable=body.billable,
        hourly_rate=body.hourly_rate,
        tags=body.tags or [],
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.info("Time entry %s created for employee %s (%s min)", entry.id, entry.employee_id, entry.duration)
    return entry


@router.get("/{entry_id}", response_model=TimeEntryResponse)
def get_entry(
    entry_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return _get_entry_or_404(db, entry_id)


@router.put("/{entry_id}", response_model=TimeEntryResponse)
def update_entry(
    entry_id: str,
    body: TimeEntryUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    entry = _get_entry_or_404(db, entry_id)
    updates = body.model_dump(exclude_unset=True)

    merged = {name: getattr(entry, name) for name in _EDITABLE_FIELDS}
    merged.update(updates)
    merged["id"] = entry.id
    _require_valid(merged)

    if merged["end_time"] is not None:
        _require_no_overlap(db, merged)
    elif _active_timer(db, merged["employee_id"], exclude_id=entry.id):
        raise HTTPException(status_code=409, detail="User already has an active timer running")

    # a stored explicit duration survives edits that leave the times alone
    duration = merged["duration"]
    times_changed = "start_time" in updates or "end_time" in updates
    if merged["end_time"] is None:
        duration = None
    elif not duration or (times_changed and "duration" not in updates):
        duration = calculate_duration(merged["start_time"], merged["end_time"])
    merged["duration"] = duration

    for name in _EDITABLE_FIELDS:
        value = merged[name]
        if name in ("start_time", "end_time"):
            value = _utc(value)
        setattr(entry, name, value)
    entry.is_active = merged["end_time"] is None

    db.commit()
    db.refresh(entry)
    logger.info("Time entry %s updated", entry.id)
    return entry


@router.delete("/{entry_id}")
def delete_entry(
    entry_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    entry = _get_entry_or_404(db, entry_id)
    db.delete(entry)
    db.commit()
    logger.info("Time entry %s deleted by %s", entry_id, user.id)
    return {"ok": True, "id": entry_id}
