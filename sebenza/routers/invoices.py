"""Invoices router."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from sebenza.database import get_db
from sebenza.dependencies import CurrentUser, get_current_user
from sebenza.models.accounting import Invoice
from sebenza.schemas.accounting import InvoiceCreate, InvoiceUpdate, InvoiceResponse, InvoicePage
from sebenza.services.crud import PaginationParams, apply_search, apply_sort, paginate, pagination_params

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/invoices", tags=["Invoices"])


def _next_invoice_id(db: Session) -> str:
    numbers = []
    for (invoice_id,) in db.query(Invoice.id).filter(Invoice.id.like("INV-%")).all():
        suffix = invoice_id.removeprefix("INV-")
        if suffix.isdigit():
            numbers.append(int(suffix))
    return f"INV-{max(numbers, default=0) + 1:03d}"


def _get_invoice_or_404(db: Session, invoice_id: str) -> Invoice:
    invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


@router.get("/", response_model=InvoicePage)
def list_invoices(
    params: PaginationParams = Depends(pagination_params),
    client: Optional[str] = Query(None),
    project_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    q = apply_search(db.query(Invoice), params.search, Invoice.id, Invoice.client)
    if client:
        q = q.filter(Invoice.client == client)
    if project_id:
        q = q.filter(Invoice.project_id == project_id)
    if status:
        q = q.filter(Invoice.status == status)
    q = apply_sort(q, Invoice, params.sort_by, params.sort_order)
    items, pagination = paginate(q, params)
    return {"items": items, "pagination": pagination}


@router.post("/", response_model=InvoiceResponse, status_code=201)
def create_invoice(
    body: InvoiceCreate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    invoice = Invoice(id=_next_invoice_id(db), **body.model_dump())
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    logger.info("Invoice %s created for %s", invoice.id, invoice.client)
    return invoice


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    return _get_invoice_or_404(db, invoice_id)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
def update_invoice(
    invoice_id: str,
    body: InvoiceUpdate,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    invoice = _get_invoice_or_404(db, invoice_id)
    for k, v in body.model_dump(exclude_unset=True).items():
        setattr(invoice, k, v)
    db.commit()
    db.refresh(invoice)
    return invoice


@router.delete("/{invoice_id}")
def delete_invoice(
    invoice_id: str,
    db: Session = Depends(get_db),
    user: CurrentUser = Depends(get_current_user),
):
    invoice = _get_invoice_or_404(db, invoice_id)
    db.delete(invoice)
    db.commit()
    logger.info("Invoice %s deleted by %s", invoice_id, user.id)
    return {"ok": True, "id": invoice_id}
