"""
Test Reconciliation Matching

Amount matching in cents, the system transaction projection and the
selection/match/unmatch session.
"""

from datetime import date
from decimal import Decimal

from sebenza.services.reconciliation import (
    MatchOutcome,
    ReconciliationSession,
    SystemTransaction,
    is_match,
    project_system_transactions,
    to_cents,
)

INVOICES = [
    {"id": "INV-001", "client": "Nexus Corp", "paid_amount": Decimal("2650.00"), "date": date(2024, 10, 15)},
    {"id": "INV-002", "client": "Quantum Solutions", "paid_amount": None, "date": date(2024, 11, 22)},
    {"id": "INV-003", "client": "Stellar Goods", "paid_amount": Decimal("850.00"), "date": date(2024, 9, 30)},
]
EXPENSES = [
    {"id": "exp-1", "description": "Printer paper and ink", "amount": Decimal("75.50"), "date": date(2024, 10, 20)},
    {"id": "exp-2", "description": "Software subscription", "amount": Decimal("200.00"), "date": date(2024, 10, 1)},
]


def test_to_cents():
    assert to_cents(Decimal("75.50")) == 7550
    assert to_cents(-75.5) == -7550
    assert to_cents("0.1") + to_cents("0.2") == to_cents("0.3")


def test_is_match_credit_and_debit():
    assert is_match({"amount": 2650.00, "type": "credit"}, {"amount": Decimal("2650.00")})
    assert is_match({"amount": -75.50, "type": "debit"}, {"amount": Decimal("75.50")})
    assert not is_match({"amount": -75.50, "type": "debit"}, {"amount": Decimal("-75.50")})
    assert not is_match({"amount": 2000.00, "type": "credit"}, {"amount": Decimal("2650.00")})
    assert not is_match(None, {"amount": 1})


def test_projection_only_includes_paid_invoices():
    txs = project_system_transactions(INVOICES, EXPENSES)
    assert [tx.id for tx in txs] == ["exp-1", "INV-001", "exp-2", "INV-003"]

    invoice = next(tx for tx in txs if tx.id == "INV-001")
    assert invoice.type == "credit"
    assert invoice.source == "invoice"
    assert invoice.amount == Decimal("2650.00")
    assert invoice.description == "Invoice INV-001 - Nexus Corp"

    expense = next(tx for tx in txs if tx.id == "exp-1")
    assert expense.type == "debit"
    assert expense.amount == Decimal("75.50")


def test_select_toggles():
    session = ReconciliationSession()
    assert session.select_bank_transaction("bt-1") is MatchOutcome.SELECTED
    assert session.selected_bank_tx_id == "bt-1"
    assert session.select_bank_transaction("bt-1") is MatchOutcome.DESELECTED
    assert session.selected_bank_tx_id is None


def test_confirm_without_selection_is_noop():
    session = ReconciliationSession()
    assert session.confirm_match("INV-001") is MatchOutcome.NOOP
    assert session.reconciled_items == {}


def test_confirm_match_and_unmatch():
    session = ReconciliationSession()
    session.select_bank_transaction("bt-3")
    assert session.confirm_match("INV-001") is MatchOutcome.MATCHED
    assert session.reconciled_items == {"bt-3": "INV-001"}
    assert session.selected_bank_tx_id is None
    assert session.is_system_reconciled("INV-001")

    assert session.unmatch("bt-3") is MatchOutcome.UNMATCHED
    assert "bt-3" not in session.reconciled_items
    assert session.unmatch("bt-3") is MatchOutcome.NOOP


def test_bank_transaction_maps_to_one_system_transaction():
    session = ReconciliationSession({"bt-3": "INV-001"})
    session.selected_bank_tx_id = "bt-3"
    session.confirm_match("INV-003")
    assert session.reconciled_items == {"bt-3": "INV-003"}


def test_system_transaction_maps_to_one_bank_transaction():
    session = ReconciliationSession({"bt-3": "INV-001"})
    session.select_bank_transaction("bt-4")
    session.confirm_match("INV-001")
    assert session.reconciled_items == {"bt-4": "INV-001"}


def test_selecting_reconciled_bank_transaction_unmatches():
    session = ReconciliationSession({"bt-3": "INV-001"})
    assert session.select_bank_transaction("bt-3") is MatchOutcome.UNMATCHED
    assert session.reconciled_items == {}
    assert session.selected_bank_tx_id is None


def test_system_click():
    session = ReconciliationSession({"bt-3": "INV-001"})
    assert session.handle_system_transaction_click("INV-001") is MatchOutcome.UNMATCHED
    assert session.handle_system_transaction_click("exp-1") is MatchOutcome.NOOP
    session.select_bank_transaction("bt-2")
    assert session.handle_system_transaction_click("exp-1") is MatchOutcome.MATCHED
    assert session.reconciled_items == {"bt-2": "exp-1"}


def test_potential_matches_skip_reconciled():
    txs = project_system_transactions(INVOICES, EXPENSES)
    session = ReconciliationSession()
    bank_tx = {"id": "bt-2", "amount": Decimal("-75.50"), "type": "debit"}
    assert [tx.id for tx in session.potential_matches(bank_tx, txs)] == ["exp-1"]

    session = ReconciliationSession({"bt-9": "exp-1"})
    assert session.potential_matches(bank_tx, txs) == []
    assert session.potential_matches(None, txs) == []


def test_system_transaction_is_hashable_value():
    tx = SystemTransaction("exp-1", date(2024, 10, 20), "x", Decimal("1.00"), "debit", "expense")
    assert tx == SystemTransaction("exp-1", date(2024, 10, 20), "x", Decimal("1.00"), "debit", "expense")
    assert len({tx, tx}) == 1


def test_unmatch_clears_selection_on_same_bank_transaction():
    session = ReconciliationSession({"bt-3": "INV-001"})
    session.selected_bank_tx_id = "bt-3"
    assert session.unmatch("bt-3") is MatchOutcome.UNMATCHED
    assert "bt-3" not in session.reconciled_items
    assert session.selected_bank_tx_id is None


def test_unmatch_keeps_selection_on_other_bank_transaction():
    session = ReconciliationSession({"bt-3": "INV-001"}, selected_bank_tx_id="bt-2")
    session.unmatch("bt-3")
    assert session.selected_bank_tx_id == "bt-2"
