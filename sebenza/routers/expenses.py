"""Expenses router."""

import logging
import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from sebenza.database import get_db
from sebenza.dependencies import CurrentUser, get_current_user
from sebenza.models.accounting import Expense
from sebenza.schemas.accounting import ExpenseCreate, ExpenseUpdate, ExpenseResponse, ExpensePage
from sebenza.services.crud import PaginationParams, apply_search, apply_sort, paginate, pagination_params

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/expenses", tags=["Expenses"])


def _get_expense_or_404(db: Session, expense_id: str) -> Expense:
    expense = db.query(Expense).filter(Expense.id == expense_id).first()
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense


@router.get("/", response_model=ExpensePage)
def list_expenses(
    params: PaginationParams = Depends(pagination_params),
    category: Optional[str] = Query(None),
    is_billable: Optional[bool] = Query(None),
    client_id: Optional[str] = Query(None),
    project_id: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    q = apply_search(db.query(Expense), params.search, Expense.description, Expense.category)
    if category:
        q = q.filter(Expense.category.ilike(f"%{category}%"))
    if is_billable is not None:
        q = q.filter(Expense.is_billable.is_(is_billable))
    if client_id:
        q = q.filter(Expense.client_id == client_id)
    if project_id:
        q = q.filter(Expense.project_id == project_id)
    if date_from:
        q = q.filter(Expense.date >= date_from)
    if date_to:
        q = q.filter(Expense.date <= date_to)
    q = apply_sort(q, Expense, params.sort_by or "date", params.sort_order if params.sort_by else "desc")
    items, pagination = paginate(q, params)
    return {"items": items, "pagination": pagination}


@router.post("/", response_model=ExpenseResponse, status_code=201)
def create_expense(
    body: ExpenseCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    data = body.model_dump()
    data["date"] = data["date"] or date.today()
    expense = Expense(id=f"exp-{uuid.uuid4().hex[:12]}", **data)
    db.add(expense)
    db.commit()
    db.refresh(expense)
    logger.info("Expense %s recorded (%s)", expense.id, expense.amount)
    return expense


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return _get_expense_or_404(db, expense_id)


@router.put("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: str,
    body: ExpenseUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    expense = _get_expense_or_404(db, expense_id)
    for k, v in body.model_dump(exclude_unset=True).items():
        setattr(expense, k, v)
    db.commit()
    db.refresh(expense)
    return expense


@router.delete("/{expense_id}")
def delete_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    expense = _get_expense_or_404(db, expense_id)
    db.delete(expense)
    db.commit()
    logger.info("Expense %s deleted by %s", expense_id, user.id)
    return {"ok": True, "id": expense_id}
