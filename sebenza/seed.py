"""
Seed script for Sebenza — loads the demo users, time entries, timesheets,
invoices, expenses and one bank statement.

Run: python -m sebenza.seed
"""
import logging
import sys
from datetime import date, datetime, timezone
from decimal import Decimal

from sebenza.database import SessionLocal
from sebenza.models.accounting import Expense, Invoice
from sebenza.models.reconciliation import BankStatement, BankTransaction
from sebenza.models.time_entry import TimeEntry
from sebenza.models.timesheet import Timesheet
from sebenza.models.user import User
from sebenza.services.auth import hash_password

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password"

USERS = [
    {"id": "admin-user-id", "email": "admin@sebenza.com", "name": "Admin User", "role": "admin"},
    {"id": "user-john", "email": "john@sebenza.com", "name": "John Doe", "role": "user"},
]


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


TIME_ENTRIES = [
    {
        "id": "time-1", "employee_id": "emp-1", "project_id": "proj-1", "task_id": "task-1",
        "description": "Frontend development for user authentication",
        "start_time": _ts("2025-07-04T09:00:00"), "end_time": _ts("2025-07-04T12:00:00"),
        "duration": 180, "hourly_rate": Decimal("75"), "tags": ["development", "frontend"],
    },
    {
        "id": "time-2", "employee_id": "emp-1", "project_id": "proj-1", "task_id": "task-2",
        "description": "Code review and testing",
        "start_time": _ts("2025-07-04T13:00:00"), "end_time": _ts("2025-07-04T15:30:00"),
        "duration": 150, "hourly_rate": Decimal("75"), "tags": ["review", "testing"],
    },
    {
        "id": "time-3", "employee_id": "emp-2", "project_id": "proj-2",
        "description": "Client meeting and requirements gathering",
        "start_time": _ts("2025-07-04T10:00:00"), "end_time": _ts("2025-07-04T11:00:00"),
        "duration": 60, "hourly_rate": Decimal("100"), "tags": ["meeting", "client"],
    },
    {
        "id": "time-4", "employee_id": "emp-1", "project_id": "proj-1",
        "description": "Working on API documentation",
        "start_time": _ts("2025-07-04T16:00:00"), "end_time": None,
        "duration": None, "hourly_rate": Decimal("75"), "tags": ["documentation"],
        "is_active": True,
    },
]

TIMESHEETS = [
    {
        "id": "timesheet-1", "employee_id": "emp-1",
        "week_start_date": date(2025, 6, 30), "week_end_date": date(2025, 7, 6),
        "status": "submitted", "submitted_at": _ts("2025-07-04T17:00:00"),
        "comments": "Regular week, completed all assigned tasks.",
    },
    {
        "id": "timesheet-2", "employee_id": "emp-2",
        "week_start_date": date(2025, 6, 30), "week_end_date": date(2025, 7, 6),
        "status": "approved", "submitted_at": _ts("2025-07-03T17:00:00"),
        "approved_at": _ts("2025-07-04T09:00:00"), "approved_by": "admin-user-id",
        "comments": "Good work on client presentations.",
    },
]

INVOICES = [
    {"id": "INV-001", "client": "Nexus Corp", "amount": Decimal("2500.00"), "paid_amount": Decimal("2650.00"),
     "status": "Paid", "date": date(2024, 10, 15), "project_id": "proj-1"},
    {"id": "INV-002", "client": "Quantum Solutions", "amount": Decimal("1200.50"), "paid_amount": None,
     "status": "Pending", "date": date(2024, 11, 22)},
    {"id": "INV-003", "client": "Stellar Goods", "amount": Decimal("850.00"), "paid_amount": Decimal("850.00"),
     "status": "Paid", "date": date(2024, 9, 30)},
    {"id": "INV-004", "client": "Apex Logistics", "amount": Decimal("3400.00"), "paid_amount": None,
     "status": "Pending", "date": date(2024, 11, 1), "project_id": "proj-2"},
]

EXPENSES = [
    {"id": "exp-1", "category": "Office Supplies", "description": "Printer paper and ink",
     "amount": Decimal("75.50"), "date": date(2024, 10, 20)},
    {"id": "exp-2", "category": "Software", "description": "Subscription for project management tool",
     "amount": Decimal("200.00"), "date": date(2024, 10, 1)},
    {"id": "exp-3", "category": "Travel", "description": "Client meeting in Chicago",
     "amount": Decimal("450.00"), "date": date(2024, 9, 15)},
]

DEMO_STATEMENT_ID = "stmt-demo"
BANK_TRANSACTIONS = [
    ("bt-1", date(2024, 11, 1), "Deposit from Apex Logistics", Decimal("2000.00")),
    ("bt-2", date(2024, 10, 20), "Staples", Decimal("-75.50")),
    ("bt-3", date(2024, 10, 20), "Online Pmt, Nexus Corp", Decimal("2650.00")),
    ("bt-4", date(2024, 10, 15), "ACH Transfer #12345", Decimal("850.00")),
    ("bt-5", date(2024, 10, 5), "Monthly Software Fee", Decimal("-200.00")),
    ("bt-6", date(2024, 10, 2), "Unknown Withdrawal", Decimal("-150.00")),
]


def seed_users(db):
    for data in USERS:
        if db.query(User).filter(User.email == data["email"]).first():
            logger.info("User %s already exists, skipping.", data["email"])
            continue
        db.add(User(password_hash=hash_password(DEMO_PASSWORD), **data))
        logger.info("Created user %s (%s)", data["email"], data["role"])


def seed_time_tracking(db):
    for data in TIME_ENTRIES:
        if db.get(TimeEntry, data["id"]):
            continue
        db.add(TimeEntry(date=data["start_time"].date(), billable=True, **data))
    for data in TIMESHEETS:
        if db.get(Timesheet, data["id"]):
            continue
        db.add(Timesheet(**data))


def seed_accounting(db):
    for data in INVOICES:
        if not db.get(Invoice, data["id"]):
            db.add(Invoice(**data))
    for data in EXPENSES:
        if not db.get(Expense, data["id"]):
            db.add(Expense(**data))


def seed_bank_statement(db):
    if db.get(BankStatement, DEMO_STATEMENT_ID):
        logger.info("Demo bank statement already exists, skipping.")
        return
    statement = BankStatement(id=DEMO_STATEMENT_ID, reference="October 2024", account_name="Business Cheque")
    for tx_id, tx_date, description, amount in BANK_TRANSACTIONS:
        statement.transactions.append(BankTransaction(
            id=tx_id,
            date=tx_date,
            description=description,
            amount=amount,
            type="debit" if amount < 0 else "credit",
        ))
    db.add(statement)


def run_seed():
    db = SessionLocal()
    try:
        seed_users(db)
        seed_time_tracking(db)
        seed_accounting(db)
        seed_bank_statement(db)
        db.commit()
        logger.info("Seed complete.")
    except Exception:
        db.rollback()
        logger.exception("Seed failed")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    run_seed()
