"""
Bank reconciliation router.

Statements arrive already parsed (one JSON list of lines per import). The
operator selects a bank line, the API highlights system transactions with a
matching amount, and the operator confirms whichever pairing they choose.
Matches and the current selection are stored per statement.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from sebenza.database import get_db
from sebenza.dependencies import CurrentUser, get_current_user, require_admin
from sebenza.models.accounting import Expense, Invoice
from sebenza.models.reconciliation import BankStatement, BankTransaction, ReconciliationMatch
from sebenza.schemas.reconciliation import (
    BankTransactionOut,
    MatchActionResponse,
    SelectBankTransaction,
    StatementCreate,
    StatementDetail,
    StatementSummary,
    SystemTransactionAction,
    SystemTransactionOut,
)
from sebenza.services.audit import log_action
from sebenza.services.reconciliation import (
    MatchOutcome,
    ReconciliationSession,
    SystemTransaction,
    project_system_transactions,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/reconciliation", tags=["Reconciliation"])

_OUTCOME_MESSAGES = {
    MatchOutcome.SELECTED: "Select a system transaction to match.",
    MatchOutcome.DESELECTED: "Selection cleared.",
    MatchOutcome.MATCHED: "The transactions have been successfully reconciled.",
    MatchOutcome.UNMATCHED: "The transaction has been un-matched.",
    MatchOutcome.NOOP: "Nothing to do: select a bank transaction first.",
}


# ─────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────

def _get_statement_or_404(db: Session, statement_id: str) -> BankStatement:
    statement = db.query(BankStatement).filter(BankStatement.id == statement_id).first()
    if not statement:
        raise HTTPException(status_code=404, detail="Bank statement not found")
    return statement


def _system_transactions(db: Session) -> list[SystemTransaction]:
    return project_system_transactions(db.query(Invoice).all(), db.query(Expense).all())


def _load_session(statement: BankStatement) -> ReconciliationSession:
    return ReconciliationSession(
        reconciled_items={m.bank_transaction_id: m.system_transaction_id for m in statement.matches},
        selected_bank_tx_id=statement.selected_bank_transaction_id,
    )


def _save_session(db: Session, statement: BankStatement, session: ReconciliationSession, user_id: str) -> None:
    wanted = set(session.reconciled_items.items())
    for match in list(statement.matches):
        if (match.bank_transaction_id, match.system_transaction_id) not in wanted:
            statement.matches.remove(match)
    # deletes must reach the database before inserts that reuse a unique key
    db.flush()

    stored = {(m.bank_transaction_id, m.system_transaction_id) for m in statement.matches}
    for bank_tx_id, system_tx_id in wanted - stored:
        statement.matches.append(ReconciliationMatch(
            statement_id=statement.id,
            bank_transaction_id=bank_tx_id,
            system_transaction_id=system_tx_id,
            matched_by=user_id,
        ))
    statement.selected_bank_transaction_id = session.selected_bank_tx_id


def _summary_fields(statement: BankStatement) -> dict:
    return {
        "id": statement.id,
        "reference": statement.reference,
        "account_name": statement.account_name,
        "imported_at": statement.imported_at,
        "transaction_count": len(statement.transactions),
        "matched_count": len(statement.matches),
    }


def _detail(db: Session, statement: BankStatement) -> StatementDetail:
    session = _load_session(statement)
    system_txs = _system_transactions(db)

    selected = next((t for t in statement.transactions if t.id == session.selected_bank_tx_id), None)
    potential_ids = {tx.id for tx in session.potential_matches(selected, system_txs)}

    def _status(tx: SystemTransaction) -> str:
        if session.is_system_reconciled(tx.id):
            return "reconciled"
        return "potential" if tx.id in potential_ids else "unmatched"

    return StatementDetail(
        **_summary_fields(statement),
        selected_bank_transaction_id=session.selected_bank_tx_id,
        matches=session.reconciled_items,
        bank_transactions=[
            BankTransactionOut(
                id=t.id,
                date=t.date,
                description=t.description,
                amount=float(t.amount),
                type=t.type,
                reconciled=session.is_reconciled(t.id),
                selected=t.id == session.selected_bank_tx_id,
                matched_system_transaction_id=session.reconciled_items.get(t.id),
            )
            for t in statement.transactions
        ],
        system_transactions=[
            SystemTransactionOut(
                id=tx.id,
                date=tx.date,
                description=tx.description,
                amount=float(tx.amount),
                type=tx.type,
                source=tx.source,
                status=_status(tx),
            )
            for tx in system_txs
        ],
    )


def _apply(db: Session, statement: BankStatement, session: ReconciliationSession,
           outcome: MatchOutcome, user: CurrentUser) -> MatchActionResponse:
    before = {m.bank_transaction_id: m.system_transaction_id for m in statement.matches}
    _save_session(db, statement, session, user.id)
    if outcome in (MatchOutcome.MATCHED, MatchOutcome.UNMATCHED):
        log_action(
            db, user.id, f"reconciliation_{outcome.value}", "bank_statement", statement.id,
            details={"before": before, "after": session.reconciled_items},
            commit=False,
        )
        logger.info("Statement %s: %s by %s", statement.id, outcome.value, user.id)
    db.commit()
    db.refresh(statement)
    return MatchActionResponse(
        outcome=outcome.value,
        message=_OUTCOME_MESSAGES[outcome],
        statement=_detail(db, statement),
    )


# ─────────────────────────────────────────────────────────────
# Statements
# ─────────────────────────────────────────────────────────────

@router.post("/statements", response_model=StatementDetail, status_code=201)
def import_statement(
    body: StatementCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    ids = [t.id for t in body.transactions if t.id]
    if len(ids) != len(set(ids)):
        raise HTTPException(status_code=400, detail="Duplicate bank transaction ids in statement")

    statement = BankStatement(reference=body.reference, account_name=body.account_name, created_by=user.id)
    for t in body.transactions:
        statement.transactions.append(BankTransaction(
            id=t.id or f"bt-{uuid.uuid4().hex[:10]}",
            date=t.date,
            description=t.description,
            amount=t.amount,
            type=t.type,
        ))
    db.add(statement)
    db.commit()
    db.refresh(statement)
    logger.info("Imported statement %s (%d lines)", statement.id, len(statement.transactions))
    return _detail(db, statement)


@router.get("/statements", response_model=list[StatementSummary])
def list_statements(
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    statements = db.query(BankStatement).order_by(BankStatement.imported_at.desc()).all()
    return [StatementSummary(**_summary_fields(s)) for s in statements]


@router.get("/statements/{statement_id}", response_model=StatementDetail)
def get_statement(
    statement_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return _detail(db, _get_statement_or_404(db, statement_id))


@router.delete("/statements/{statement_id}")
def delete_statement(
    statement_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(require_admin),
):
    statement = _get_statement_or_404(db, statement_id)
    db.delete(statement)
    db.commit()
    logger.info("Statement %s deleted by %s", statement_id, user.id)
    return {"ok": True, "id": statement_id}


# ─────────────────────────────────────────────────────────────
# Matching
# ─────────────────────────────────────────────────────────────

@router.post("/statements/{statement_id}/select", response_model=MatchActionResponse)
def select_bank_transaction(
    statement_id: str,
    body: SelectBankTransaction,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Select a bank line; selecting it again clears it, selecting a matched line un-matches it."""
    statement = _get_statement_or_404(db, statement_id)
    if not any(t.id == body.bank_transaction_id for t in statement.transactions):
        raise HTTPException(status_code=404, detail="Bank transaction not found")

    session = _load_session(statement)
    outcome = session.select_bank_transaction(body.bank_transaction_id)
    return _apply(db, statement, session, outcome, user)


@router.post("/statements/{statement_id}/system-click", response_model=MatchActionResponse)
def system_transaction_click(
    statement_id: str,
    body: SystemTransactionAction,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    """Un-match a reconciled system transaction, or match it to the selected bank line."""
    statement = _get_statement_or_404(db, statement_id)
    if not any(tx.id == body.system_transaction_id for tx in _system_transactions(db)):
        raise HTTPException(status_code=404, detail="System transaction not found")

    session = _load_session(statement)
    outcome = session.handle_system_transaction_click(body.system_transaction_id)
    return _apply(db, statement, session, outcome, user)


@router.post("/statements/{statement_id}/match", response_model=MatchActionResponse)
def confirm_match(
    statement_id: str,
    body: SystemTransactionAction,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    statement = _get_statement_or_404(db, statement_id)
    if not any(tx.id == body.system_transaction_id for tx in _system_transactions(db)):
        raise HTTPException(status_code=404, detail="System transaction not found")

    session = _load_session(statement)
    outcome = session.confirm_match(body.system_transaction_id)
    return _apply(db, statement, session, outcome, user)


@router.delete("/statements/{statement_id}/matches/{bank_transaction_id}", response_model=MatchActionResponse)
def unmatch(
    statement_id: str,
    bank_transaction_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    statement = _get_statement_or_404(db, statement_id)
    session = _load_session(statement)
    outcome = session.unmatch(bank_transaction_id)
    return _apply(db, statement, session, outcome, user)
