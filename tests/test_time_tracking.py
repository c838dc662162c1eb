"""
Test Time Tracking Helpers

Durations, week boundaries, hour roll-ups, validation and overlap detection.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from sebenza.services.time_tracking import (
    InvalidTimestamp,
    calculate_billable_hours,
    calculate_duration,
    calculate_total_hours,
    check_time_overlap,
    format_duration,
    generate_time_entry_id,
    generate_timesheet_id,
    get_week_end_date,
    get_week_start_date,
    round_hours,
    validate_time_entry,
)


def _entry(entry_id, start, end, employee_id="e1"):
    return {
        "id": entry_id,
        "employee_id": employee_id,
        "start_time": f"2025-07-04T{start}:00.000Z",
        "end_time": f"2025-07-04T{end}:00.000Z",
    }


# ── Durations ──

def test_calculate_duration_minutes():
    assert calculate_duration("2025-07-04T09:00:00.000Z", "2025-07-04T12:00:00.000Z") == 180
    assert calculate_duration("2025-07-04T09:00:00Z", "2025-07-04T09:00:00Z") == 0


def test_calculate_duration_rounds_half_up():
    start = datetime(2025, 7, 4, 9, 0, tzinfo=timezone.utc)
    assert calculate_duration(start, start + timedelta(seconds=29)) == 0
    assert calculate_duration(start, start + timedelta(seconds=30)) == 1
    assert calculate_duration(start, start + timedelta(seconds=89)) == 1
    assert calculate_duration(start, start + timedelta(seconds=90)) == 2


def test_calculate_duration_mixed_offsets():
    # 09:00 UTC and 11:30 at +02:00 are thirty minutes apart
    assert calculate_duration("2025-07-04T09:00:00Z", "2025-07-04T11:30:00+02:00") == 30


def test_calculate_duration_invalid_timestamp():
    with pytest.raises(InvalidTimestamp):
        calculate_duration("not-a-date", "2025-07-04T09:00:00Z")


def test_format_duration():
    assert format_duration(90) == "01:30"
    assert format_duration(0) == "00:00"
    assert format_duration(605) == "10:05"


# ── Week boundaries ──

def test_week_start_is_monday_for_every_day_of_week():
    monday = date(2025, 6, 30)
    for offset in range(7):
        day = monday + timedelta(days=offset)
        assert get_week_start_date(day) == "2025-06-30"
        assert get_week_end_date(day) == "2025-07-06"


def test_week_bounds_accept_strings_and_datetimes():
    assert get_week_start_date("2025-07-04") == "2025-06-30"
    assert get_week_start_date(datetime(2025, 7, 6, 23, 59)) == "2025-06-30"
    assert get_week_start_date("2025-07-07") == "2025-07-07"


# ── Roll-ups ──

def test_total_hours_from_durations():
    entries = [{"duration": 60}, {"duration": 90}, {"duration": 30}]
    assert calculate_total_hours(entries) == 3.0


def test_total_hours_falls_back_to_times():
    entries = [_entry("a", "09:00", "10:30"), {"duration": None}]
    assert calculate_total_hours(entries) == 1.5


def test_billable_hours_only_counts_billable():
    entries = [
        {"duration": 60, "billable": True},
        {"duration": 60, "billable": False},
        {"duration": 60, "billable": True},
    ]
    assert calculate_billable_hours(entries) == 2.0


def test_round_hours():
    assert round_hours(1 / 3) == 0.33
    assert round_hours(2.005) == 2.01


# ── Identifiers ──

def test_generated_ids_have_prefix_and_are_unique():
    ids = {generate_time_entry_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(i.startswith("time-") for i in ids)
    assert generate_timesheet_id().startswith("timesheet-")


# ── Validation ──

def test_validate_complete_entry():
    entry = {
        "employee_id": "e1",
        "project_id": "p1",
        "description": "Work",
        "start_time": "2025-07-04T09:00:00Z",
        "end_time": "2025-07-04T10:00:00Z",
        "date": "2025-07-04",
    }
    result = validate_time_entry(entry)
    assert result.valid
    assert result.errors == []


def test_validate_collects_every_error():
    entry = {
        "employee_id": "e1",
        "project_id": "p1",
        "start_time": "2025-07-04T10:00:00Z",
        "end_time": "2025-07-04T10:00:00Z",
        "date": "2025-07-04",
    }
    result = validate_time_entry(entry)
    assert not result.valid
    assert "Description is required" in result.errors
    assert "End time must be after start time" in result.errors
    assert len(result.errors) >= 2


def test_validate_reports_unparseable_times():
    entry = {
        "employee_id": "e1",
        "project_id": "p1",
        "description": "Work",
        "start_time": "yesterday",
        "date": "2025-07-04",
    }
    assert validate_time_entry(entry).errors == ["Start time is invalid"]


def test_validate_open_entry_is_valid():
    entry = {
        "employee_id": "e1",
        "project_id": "p1",
        "description": "Running",
        "start_time": "2025-07-04T09:00:00Z",
        "date": "2025-07-04",
    }
    assert validate_time_entry(entry).valid


# ── Overlap ──

def test_overlap_same_employee():
    existing = _entry("a", "09:00", "10:00")
    candidate = _entry("b", "09:30", "10:30")
    result = check_time_overlap(candidate, [existing])
    assert result.has_overlap
    assert result.conflicting_entries == [existing]


def test_touching_boundary_is_not_overlap():
    existing = _entry("a", "09:00", "10:00")
    assert not check_time_overlap(_entry("c", "10:00", "11:00"), [existing]).has_overlap


def test_other_employee_is_not_overlap():
    existing = _entry("a", "09:00", "10:00")
    candidate = _entry("d", "09:00", "10:00", employee_id="e2")
    assert not check_time_overlap(candidate, [existing]).has_overlap


def test_overlap_skips_the_entry_itself():
    existing = _entry("a", "09:00", "10:00")
    edited = _entry("a", "09:15", "10:15")
    assert not check_time_overlap(edited, [existing]).has_overlap


def test_overlap_ignores_open_entries():
    running = {"id": "r", "employee_id": "e1", "start_time": "2025-07-04T08:00:00Z", "end_time": None}
    assert not check_time_overlap(_entry("b", "09:00", "10:00"), [running]).has_overlap
    open_candidate = {"employee_id": "e1", "start_time": "2025-07-04T09:00:00Z"}
    assert not check_time_overlap(open_candidate, [_entry("a", "09:00", "10:00")]).has_overlap
