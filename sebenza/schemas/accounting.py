"""Invoice and expense schemas."""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Literal, Optional, List

InvoiceStatus = Literal["Paid", "Pending", "Partial", "Overdue"]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


# ── Invoices ──


class InvoiceCreate(BaseModel):
    client: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0)
    paid_amount: Optional[Decimal] = Field(default=None, ge=0)
    status: InvoiceStatus = "Pending"
    date: date_type
    project_id: Optional[str] = None
    notes: Optional[str] = None


class InvoiceUpdate(BaseModel):
    client: Optional[str] = Field(default=None, min_length=1, max_length=200)
    amount: Optional[Decimal] = Field(default=None, gt=0)
    paid_amount: Optional[Decimal] = Field(default=None, ge=0)
    status: Optional[InvoiceStatus] = None
    date: Optional[date_type] = None
    project_id: Optional[str] = None
    notes: Optional[str] = None


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    client: str
    amount: float
    paid_amount: Optional[float] = None
    status: str
    date: date_type
    project_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InvoicePage(BaseModel):
    items: List[InvoiceResponse]
    pagination: Pagination


# ── Expenses ──


class ExpenseCreate(BaseModel):
    category: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    date: Optional[date_type] = None  # defaults to today
    client_id: Optional[str] = None
    project_id: Optional[str] = None
    is_billable: bool = False
    receipt_url: Optional[str] = None


class ExpenseUpdate(BaseModel):
    category: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[Decimal] = Field(default=None, gt=0)
    date: Optional[date_type] = None
    client_id: Optional[str] = None
    project_id: Optional[str] = None
    is_billable: Optional[bool] = None
    receipt_url: Optional[str] = None


class ExpenseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    category: str
    description: str
    amount: float
    date: date_type
    client_id: Optional[str] = None
    project_id: Optional[str] = None
    is_billable: bool
    receipt_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ExpensePage(BaseModel):
    items: List[ExpenseResponse]
    pagination: Pagination
