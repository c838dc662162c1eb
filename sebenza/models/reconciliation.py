"""Imported bank statements and the confirmed matches made against them."""
import uuid

from sqlalchemy import Column, Integer, String, Text, DateTime, Date, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from sebenza.database import Base


def _statement_id_default() -> str:
    return f"stmt-{uuid.uuid4().hex[:12]}"


class BankStatement(Base):
    __tablename__ = "bank_statements"

    id = Column(String(64), primary_key=True, default=_statement_id_default)
    reference = Column(String(200), nullable=False)
    account_name = Column(String(200), nullable=True)
    # the bank transaction the operator is currently matching, if any
    selected_bank_transaction_id = Column(String(64), nullable=True)
    created_by = Column(String(64), nullable=True)
    imported_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    transactions = relationship(
        "BankTransaction",
        back_populates="statement",
        cascade="all, delete-orphan",
        order_by="BankTransaction.date.desc()",
    )
    matches = relationship("ReconciliationMatch", cascade="all, delete-orphan")


class BankTransaction(Base):
    __tablename__ = "bank_transactions"

    # ids come from the statement file, so they are only unique within a statement
    statement_id = Column(String(64), ForeignKey("bank_statements.id", ondelete="CASCADE"), primary_key=True)
    id = Column(String(64), primary_key=True)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=False, default="")
    amount = Column(Numeric(12, 2), nullable=False)  # signed: credit > 0, debit < 0
    type = Column(String(10), nullable=False)  # credit | debit

    statement = relationship("BankStatement", back_populates="transactions")


class ReconciliationMatch(Base):
    __tablename__ = "reconciliation_matches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    statement_id = Column(String(64), ForeignKey("bank_statements.id", ondelete="CASCADE"), nullable=False)
    bank_transaction_id = Column(String(64), nullable=False)
    system_transaction_id = Column(String(64), nullable=False)
    matched_by = Column(String(64), nullable=True)
    matched_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("statement_id", "bank_transaction_id", name="uq_recon_bank_tx"),
        UniqueConstraint("statement_id", "system_transaction_id", name="uq_recon_system_tx"),
    )
