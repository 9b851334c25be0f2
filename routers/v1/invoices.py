# routers/v1/invoices.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from database import get_db
from models import Customer, Invoice
from schemas import (
    InvoiceCreate,
    InvoiceOut,
    InvoicePage,
    InvoicePaymentIn,
    InvoicePreviewOut,
    InvoicePricingIn,
    InvoiceUpdate,
    InvoiceWhatsAppOut,
)
from services import invoice_share, invoicing
from services.pricing import LineInput, calculate_invoice
from utils.paging import paginate

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _get(db: Session, invoice_id: int) -> Invoice:
    inv = db.get(Invoice, invoice_id)
    if not inv:
        raise HTTPException(404, "Invoice not found")
    return inv


@router.get("", response_model=InvoicePage)
def list_invoices(
    q: Optional[str] = Query(None, description="Search by invoice number, customer name or number"),
    status: Optional[str] = Query(None),
    company_type: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(20, ge=1, le=1000),
    all: bool = Query(False),
    db: Session = Depends(get_db),
):
    base_q = (
        db.query(Invoice)
        .join(Customer, Invoice.customer_id == Customer.id)
        .options(selectinload(Invoice.items), selectinload(Invoice.customer))
    )
    if q and q.strip():
        like = f"%{q.strip()}%"
        base_q = base_q.filter(or_(
            Invoice.invoice_number.ilike(like),
            Customer.name.ilike(like),
            Customer.number.ilike(like),
        ))
    if status:
        base_q = base_q.filter(Invoice.status == status.upper())
    if company_type:
        base_q = base_q.filter(Invoice.company_type == company_type.upper())
    base_q = base_q.order_by(Invoice.invoice_date.desc(), Invoice.id.desc())
    return paginate(base_q, page, per_page, all)


@router.post("/preview", response_model=InvoicePreviewOut)
def preview_invoice(payload: InvoicePricingIn):
    """Run the calculator without saving anything."""
    lines = [
        LineInput(
            base_price=it.base_price,
            quantity=it.quantity,
            discount_pct=it.discount_pct,
            gst_applied=payload.gst_applied and (it.gst_applied if it.gst_applied is not None else True),
        )
        for it in payload.items
    ]
    return calculate_invoice(
        lines,
        payload.company_type,
        overall_discount=payload.overall_discount,
        extra_charges=payload.extra_charges,
        advance_paid=payload.advance_paid,
    )


@router.post("", response_model=InvoiceOut, status_code=201)
def create_invoice(payload: InvoiceCreate, db: Session = Depends(get_db)):
    inv = invoicing.create_invoice(db, payload.model_dump())
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "Invoice number already exists")
    db.refresh(inv)
    return inv


@router.get("/{invoice_id}", response_model=InvoiceOut)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return _get(db, invoice_id)


@router.put("/{invoice_id}", response_model=InvoiceOut)
def update_invoice(invoice_id: int, payload: InvoiceUpdate, db: Session = Depends(get_db)):
    inv = _get(db, invoice_id)
    invoicing.update_invoice(db, inv, payload.model_dump(exclude_unset=True))
    db.commit(); db.refresh(inv)
    return inv


@router.post("/{invoice_id}/payments", response_model=InvoiceOut)
def add_invoice_payment(invoice_id: int, payload: InvoicePaymentIn, db: Session = Depends(get_db)):
    inv = _get(db, invoice_id)
    invoicing.record_invoice_payment(db, inv, **payload.model_dump())
    db.commit(); db.refresh(inv)
    return inv


@router.post("/{invoice_id}/send-whatsapp", response_model=InvoiceWhatsAppOut)
def send_invoice_whatsapp(invoice_id: int, db: Session = Depends(get_db)):
    return invoice_share.whatsapp_share(_get(db, invoice_id))


@router.delete("/{invoice_id}")
def delete_invoice(invoice_id: int, db: Session = Depends(get_db)):
    inv = _get(db, invoice_id)
    number = inv.invoice_number
    invoicing.delete_invoice(db, inv)
    db.commit()
    return {"message": f"Invoice {number} deleted"}
