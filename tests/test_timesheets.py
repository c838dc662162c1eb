"""
Test Timesheets

Status transitions plus the weekly API: creation, duplicate weeks,
totals recomputed from live entries, approval and deletion rules.
"""

import pytest

from sebenza.services.timesheets import (
    InvalidStatusTransition,
    TimesheetStatus,
    allowed_next_states,
    validate_transition,
)


# ── Status machine ──

def test_allowed_next_states():
    assert allowed_next_states("draft") == ["submitted"]
    assert allowed_next_states("submitted") == ["approved", "draft", "rejected"]
    assert allowed_next_states("rejected") == ["draft", "submitted"]
    assert allowed_next_states("approved") == []


@pytest.mark.parametrize("current,target", [
    ("draft", "submitted"),
    ("submitted", "approved"),
    ("submitted", "rejected"),
    ("rejected", "submitted"),
    ("approved", "approved"),
])
def test_valid_transitions(current, target):
    assert validate_transition(current, target) is TimesheetStatus(target)


def test_approved_is_terminal():
    with pytest.raises(InvalidStatusTransition, match="Cannot change status of approved timesheet"):
        validate_transition("approved", "draft")


def test_draft_cannot_be_approved_directly():
    with pytest.raises(InvalidStatusTransition, match="from draft to approved"):
        validate_transition("draft", "approved")


# ── API ──

def _add_entry(client, headers, start, end, billable=True, employee_id="emp-1"):
    resp = client.post("/api/v1/time-entries/", headers=headers, json={
        "employee_id": employee_id,
        "project_id": "proj-1",
        "description": "Work",
        "start_time": start,
        "end_time": end,
        "date": start[:10],
        "billable": billable,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def _create_sheet(client, headers, employee_id="emp-1", week_start="2025-06-30"):
    return client.post("/api/v1/timesheets/", headers=headers, json={
        "employee_id": employee_id,
        "week_start_date": week_start,
    })


def test_week_bounds_endpoint(client, admin_headers):
    resp = client.get("/api/v1/timesheets/week", params={"date": "2025-07-04"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json() == {"week_start_date": "2025-06-30", "week_end_date": "2025-07-06"}


def test_create_timesheet_defaults_week_end(client, admin_headers):
    resp = _create_sheet(client, admin_headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["week_end_date"] == "2025-07-06"
    assert body["status"] == "draft"
    assert body["allowed_transitions"] == ["submitted"]
    assert body["total_hours"] == 0


def test_duplicate_week_is_rejected(client, admin_headers):
    assert _create_sheet(client, admin_headers).status_code == 201
    resp = _create_sheet(client, admin_headers)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Timesheet already exists for this week"
    # another employee can still have that week
    assert _create_sheet(client, admin_headers, employee_id="emp-2").status_code == 201


def test_create_requires_employee_and_week(client, admin_headers):
    resp = client.post("/api/v1/timesheets/", headers=admin_headers, json={"employee_id": "emp-1"})
    assert resp.status_code in (400, 422)


def test_totals_follow_live_entries(client, admin_headers):
    _add_entry(client, admin_headers, "2025-07-01T09:00:00Z", "2025-07-01T10:00:00Z")
    _add_entry(client, admin_headers, "2025-07-02T09:00:00Z", "2025-07-02T10:30:00Z", billable=False)
    # outside the week and another employee: not counted
    _add_entry(client, admin_headers, "2025-07-08T09:00:00Z", "2025-07-08T10:00:00Z")
    _add_entry(client, admin_headers, "2025-07-01T09:00:00Z", "2025-07-01T10:00:00Z", employee_id="emp-2")

    sheet = _create_sheet(client, admin_headers).json()
    assert sheet["total_hours"] == 2.5
    assert sheet["billable_hours"] == 1.0
    assert len(sheet["time_entries"]) == 2

    entry = _add_entry(client, admin_headers, "2025-07-03T09:00:00Z", "2025-07-03T09:30:00Z")
    refreshed = client.get(f"/api/v1/timesheets/{sheet['id']}", headers=admin_headers).json()
    assert refreshed["total_hours"] == 3.0
    assert entry["id"] in [e["id"] for e in refreshed["time_entries"]]


def test_submit_and_approve(client, admin_headers):
    sheet = _create_sheet(client, admin_headers).json()

    resp = client.put(f"/api/v1/timesheets/{sheet['id']}", headers=admin_headers,
                      json={"status": "submitted", "comments": "Done"})
    assert resp.status_code == 200
    assert resp.json()["submitted_at"] is not None
    assert resp.json()["comments"] == "Done"

    resp = client.put(f"/api/v1/timesheets/{sheet['id']}", headers=admin_headers, json={"status": "approved"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "approved"
    assert body["approved_at"] is not None
    me = client.get("/api/v1/auth/me", headers=admin_headers).json()
    assert body["approved_by"] == me["id"]
    assert body["allowed_transitions"] == []

    resp = client.put(f"/api/v1/timesheets/{sheet['id']}", headers=admin_headers, json={"status": "draft"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cannot change status of approved timesheet"


def test_only_admins_approve(client, admin_headers, user_headers):
    sheet = _create_sheet(client, user_headers).json()
    client.put(f"/api/v1/timesheets/{sheet['id']}", headers=user_headers, json={"status": "submitted"})
    resp = client.put(f"/api/v1/timesheets/{sheet['id']}", headers=user_headers, json={"status": "approved"})
    assert resp.status_code == 403


def test_invalid_status(client, admin_headers):
    sheet = _create_sheet(client, admin_headers).json()
    resp = client.put(f"/api/v1/timesheets/{sheet['id']}", headers=admin_headers, json={"status": "archived"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid status"


def test_delete_rules(client, admin_headers):
    draft = _create_sheet(client, admin_headers).json()
    submitted = _create_sheet(client, admin_headers, week_start="2025-07-07").json()
    client.put(f"/api/v1/timesheets/{submitted['id']}", headers=admin_headers, json={"status": "submitted"})

    assert client.delete(f"/api/v1/timesheets/{submitted['id']}", headers=admin_headers).status_code == 400
    assert client.delete(f"/api/v1/timesheets/{draft['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/v1/timesheets/{draft['id']}", headers=admin_headers).status_code == 404


def test_list_filters_by_status(client, admin_headers):
    _create_sheet(client, admin_headers)
    submitted = _create_sheet(client, admin_headers, week_start="2025-07-07").json()
    client.put(f"/api/v1/timesheets/{submitted['id']}", headers=admin_headers, json={"status": "submitted"})

    resp = client.get("/api/v1/timesheets/", params={"status": "submitted"}, headers=admin_headers)
    assert [s["id"] for s in resp.json()] == [submitted["id"]]
    all_sheets = client.get("/api/v1/timesheets/", headers=admin_headers).json()
    assert [s["week_start_date"] for s in all_sheets] == ["2025-07-07", "2025-06-30"]
