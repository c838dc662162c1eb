"""
Time aggregation helpers for time entries and weekly timesheets.

Everything here is pure: durations, week boundaries, hour roll-ups,
validation and per-employee overlap detection. Records can be plain dicts
(request payloads) or ORM rows; fields are read by their snake_case names.

Timestamps are ISO-8601 strings or datetimes. Naive values are treated as
UTC. A value that cannot be parsed raises InvalidTimestamp.
"""
import math
import secrets
import string
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional, Union

Timestamp = Union[str, datetime]

_ID_ALPHABET = string.digits + string.ascii_lowercase
_REQUIRED_FIELDS = (
    ("employee_id", "Employee ID is required"),
    ("project_id", "Project ID is required"),
    ("description", "Description is required"),
    ("start_time", "Start time is required"),
    ("date", "Date is required"),
)


class InvalidTimestamp(ValueError):
    """Raised when a start/end time is not a parseable ISO-8601 timestamp."""


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class OverlapResult:
    has_overlap: bool
    conflicting_entries: list = field(default_factory=list)


# ── Field access / parsing ──


def _get(entry: Any, name: str, default=None):
    if isinstance(entry, Mapping):
        return entry.get(name, default)
    return getattr(entry, name, default)


def parse_timestamp(value: Timestamp) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except (TypeError, ValueError):
            raise InvalidTimestamp(f"Invalid timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_date(value: Union[str, date, datetime]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# ── Durations ──


def calculate_duration(start_time: Timestamp, end_time: Timestamp) -> int:
    """Minutes between two timestamps, rounded half up. Not clamped at zero."""
    delta = parse_timestamp(end_time) - parse_timestamp(start_time)
    return math.floor(delta.total_seconds() / 60 + 0.5)


def format_duration(minutes: int) -> str:
    """90 -> '01:30'. Negative minutes are not supported."""
    minutes = int(minutes)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


# ── Week boundaries (Monday..Sunday) ──


def get_week_start_date(value: Union[str, date, datetime]) -> str:
    d = _as_date(value)
    return (d - timedelta(days=d.weekday())).isoformat()


def get_week_end_date(value: Union[str, date, datetime]) -> str:
    start = date.fromisoformat(get_week_start_date(value))
    return (start + timedelta(days=6)).isoformat()


# ── Roll-ups ──


def _entry_minutes(entry: Any) -> float:
    duration = _get(entry, "duration")
    if duration:
        return duration
    start, end = _get(entry, "start_time"), _get(entry, "end_time")
    if start and end:
        return calculate_duration(start, end)
    return 0


def calculate_total_hours(entries: Iterable[Any]) -> float:
    """Sum of entry hours. Callers round when building a timesheet."""
    return sum(_entry_minutes(e) / 60 for e in entries)


def calculate_billable_hours(entries: Iterable[Any]) -> float:
    return calculate_total_hours(e for e in entries if _get(e, "billable") is True)


def round_hours(hours: float) -> float:
    return float(Decimal(str(hours)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


# ── Identifiers ──


def _random_suffix(length: int = 9) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def generate_time_entry_id() -> str:
    return f"time-{int(time.time() * 1000)}-{_random_suffix()}"


def generate_timesheet_id() -> str:
    return f"timesheet-{int(time.time() * 1000)}-{_random_suffix()}"


# ── Validation ──


def validate_time_entry(entry: Any) -> ValidationResult:
    """Check required fields and time ordering, collecting every failure."""
    errors = [message for name, message in _REQUIRED_FIELDS if not _get(entry, name)]

    start_raw, end_raw = _get(entry, "start_time"), _get(entry, "end_time")
    start = end = None
    if start_raw:
        try:
            start = parse_timestamp(start_raw)
        except InvalidTimestamp:
            errors.append("Start time is invalid")
    if end_raw:
        try:
            end = parse_timestamp(end_raw)
        except InvalidTimestamp:
            errors.append("End time is invalid")

    if start is not None and end is not None and end <= start:
        errors.append("End time must be after start time")

    return ValidationResult(valid=not errors, errors=errors)


# ── Overlap detection ──


def _interval(entry: Any) -> Optional[tuple[datetime, datetime]]:
    start, end = _get(entry, "start_time"), _get(entry, "end_time")
    if not start or not end:
        return None
    return parse_timestamp(start), parse_timestamp(end)


def check_time_overlap(candidate: Any, existing_entries: Iterable[Any]) -> OverlapResult:
    """
    Find entries of the same employee whose [start, end) interval intersects
    the candidate's. An entry ending exactly when another starts is not a
    conflict. The candidate's own id is skipped so edits can be checked
    in place.
    """
    window = _interval(candidate)
    if window is None:
        return OverlapResult(has_overlap=False, conflicting_entries=[])

    new_start, new_end = window
    candidate_id = _get(candidate, "id")
    employee_id = _get(candidate, "employee_id")

    conflicts = []
    for entry in existing_entries:
        if candidate_id is not None and _get(entry, "id") == candidate_id:
            continue
        if _get(entry, "employee_id") != employee_id:
            continue
        other = _interval(entry)
        if other is None:
            continue
        if new_start < other[1] and other[0] < new_end:
            conflicts.append(entry)

    return OverlapResult(has_overlap=bool(conflicts), conflicting_entries=conflicts)
