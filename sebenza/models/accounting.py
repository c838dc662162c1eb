"""Invoices and expenses — the records bank statements are reconciled against."""
from sqlalchemy import Column, String, Text, Boolean, DateTime, Date, Numeric
from sqlalchemy.sql import func

from sebenza.database import Base


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(String(64), primary_key=True)  # INV-001
    client = Column(String(200), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=True)
    status = Column(String(20), nullable=False, server_default="Pending", default="Pending")
    date = Column(Date, nullable=False)
    project_id = Column(String(64), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String(64), primary_key=True)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    client_id = Column(String(64), nullable=True)
    project_id = Column(String(64), nullable=True)
    is_billable = Column(Boolean, nullable=False, default=False)
    receipt_url = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
