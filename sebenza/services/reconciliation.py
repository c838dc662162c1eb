"""
Bank reconciliation matching.

Bank statement lines are paired with system transactions (paid invoices and
recorded expenses). Amount equality only *suggests* a pairing; the operator
confirms whichever pairing they choose. Amounts are compared in integer cents.

ReconciliationSession holds the confirmed pairings (bank tx id -> system tx
id) plus the bank transaction currently selected for matching. None of its
operations raise; each returns a MatchOutcome describing what happened.
"""
import enum
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional


class MatchOutcome(str, enum.Enum):
    SELECTED = "selected"
    DESELECTED = "deselected"
    MATCHED = "matched"
    UNMATCHED = "unmatched"
    NOOP = "noop"


@dataclass(frozen=True)
class SystemTransaction:
    id: str
    date: date
    description: str
    amount: Decimal  # positive magnitude for both credits and debits
    type: str  # credit | debit
    source: str  # invoice | expense


def _get(record: Any, name: str, default=None):
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def to_cents(amount) -> int:
    """Decimal-safe conversion of a currency amount to integer minor units."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return int(value * 100)


def project_system_transactions(invoices: Iterable[Any], expenses: Iterable[Any]) -> list[SystemTransaction]:
    """Project paid invoices (credits) and expenses (debits) into one list, newest first."""
    txs = [
        SystemTransaction(
            id=_get(inv, "id"),
            date=_get(inv, "date"),
            description=f"Invoice {_get(inv, 'id')} - {_get(inv, 'client')}",
            amount=Decimal(str(_get(inv, "paid_amount"))),
            type="credit",
            source="invoice",
        )
        for inv in invoices
        if _get(inv, "paid_amount") and Decimal(str(_get(inv, "paid_amount"))) > 0
    ]
    txs.extend(
        SystemTransaction(
            id=_get(exp, "id"),
            date=_get(exp, "date"),
            description=_get(exp, "description") or "",
            amount=Decimal(str(_get(exp, "amount"))),
            type="debit",
            source="expense",
        )
        for exp in expenses
    )
    # stable sort keeps invoices ahead of expenses on the same day
    txs.sort(key=lambda tx: tx.date, reverse=True)
    return txs


def is_match(bank_tx: Any, system_tx: Any) -> bool:
    """Credits match on equal amounts; bank debits are negative, system debits positive."""
    if bank_tx is None or system_tx is None:
        return False
    bank_cents = to_cents(_get(bank_tx, "amount"))
    system_cents = to_cents(_get(system_tx, "amount"))
    if _get(bank_tx, "type") == "credit":
        return bank_cents == system_cents
    return bank_cents == -system_cents


class ReconciliationSession:
    def __init__(self, reconciled_items: Optional[dict[str, str]] = None, selected_bank_tx_id: Optional[str] = None):
        self.reconciled_items: dict[str, str] = dict(reconciled_items or {})
        self.selected_bank_tx_id = selected_bank_tx_id

    def is_reconciled(self, bank_tx_id: str) -> bool:
        return bank_tx_id in self.reconciled_items

    def bank_tx_for(self, system_tx_id: str) -> Optional[str]:
        for bank_tx_id, matched_id in self.reconciled_items.items():
            if matched_id == system_tx_id:
                return bank_tx_id
        return None

    def is_system_reconciled(self, system_tx_id: str) -> bool:
        return self.bank_tx_for(system_tx_id) is not None

    def select_bank_transaction(self, bank_tx_id: str) -> MatchOutcome:
        if self.is_reconciled(bank_tx_id):
            return self.unmatch(bank_tx_id)
        if self.selected_bank_tx_id == bank_tx_id:
            self.selected_bank_tx_id = None
            return MatchOutcome.DESELECTED
        self.selected_bank_tx_id = bank_tx_id
        return MatchOutcome.SELECTED

    def confirm_match(self, system_tx_id: str) -> MatchOutcome:
        if self.selected_bank_tx_id is None:
            return MatchOutcome.NOOP
        # one bank line per system transaction: an earlier pairing is replaced
        previous = self.bank_tx_for(system_tx_id)
        if previous is not None:
            del self.reconciled_items[previous]
        self.reconciled_items[self.selected_bank_tx_id] = system_tx_id
        self.selected_bank_tx_id = None
        return MatchOutcome.MATCHED

    def handle_system_transaction_click(self, system_tx_id: str) -> MatchOutcome:
        bank_tx_id = self.bank_tx_for(system_tx_id)
        if bank_tx_id is not None:
            return self.unmatch(bank_tx_id)
        if self.selected_bank_tx_id is not None:
            return self.confirm_match(system_tx_id)
        return MatchOutcome.NOOP

    def unmatch(self, bank_tx_id: str) -> MatchOutcome:
        removed = self.reconciled_items.pop(bank_tx_id, None)
        if self.selected_bank_tx_id == bank_tx_id:
            self.selected_bank_tx_id = None
        return MatchOutcome.UNMATCHED if removed is not None else MatchOutcome.NOOP

    def potential_matches(self, selected_bank_tx: Any, system_txs: Iterable[Any]) -> list:
        """System transactions to highlight for the selected bank transaction."""
        if selected_bank_tx is None or self.is_reconciled(_get(selected_bank_tx, "id")):
            return []
        return [
            tx for tx in system_txs
            if not self.is_system_reconciled(_get(tx, "id")) and is_match(selected_bank_tx, tx)
        ]
