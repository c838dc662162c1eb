"""Bank reconciliation schemas."""

from pydantic import BaseModel, Field, model_validator
from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Literal, Optional, List


# ── Statement import ──


class BankTransactionIn(BaseModel):
    id: Optional[str] = None
    date: date_type
    description: str = ""
    amount: Decimal  # signed: credits positive, debits negative
    type: Optional[Literal["credit", "debit"]] = None  # derived from the sign when omitted

    @model_validator(mode="after")
    def _check_type(self):
        expected = "debit" if self.amount < 0 else "credit"
        if self.type is None:
            self.type = expected
        elif self.type != expected and self.amount != 0:
            raise ValueError(f"{self.type} transactions must have a {'negative' if self.type == 'debit' else 'positive'} amount")
        return self


class StatementCreate(BaseModel):
    reference: str = Field(..., min_length=1, max_length=200)
    account_name: Optional[str] = None
    transactions: List[BankTransactionIn] = Field(..., min_length=1)


# ── Matching actions ──


class SelectBankTransaction(BaseModel):
    bank_transaction_id: str


class SystemTransactionAction(BaseModel):
    system_transaction_id: str


# ── Responses ──


class BankTransactionOut(BaseModel):
    id: str
    date: date_type
    description: str
    amount: float
    type: str
    reconciled: bool = False
    selected: bool = False
    matched_system_transaction_id: Optional[str] = None


class SystemTransactionOut(BaseModel):
    id: str
    date: date_type
    description: str
    amount: float
    type: str
    source: str
    status: Literal["reconciled", "potential", "unmatched"] = "unmatched"


class StatementSummary(BaseModel):
    id: str
    reference: str
    account_name: Optional[str] = None
    imported_at: Optional[datetime] = None
    transaction_count: int
    matched_count: int


class StatementDetail(StatementSummary):
    selected_bank_transaction_id: Optional[str] = None
    matches: dict[str, str] = {}
    bank_transactions: List[BankTransactionOut] = []
    system_transactions: List[SystemTransactionOut] = []


class MatchActionResponse(BaseModel):
    outcome: str
    message: str
    statement: StatementDetail
