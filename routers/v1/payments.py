# routers/v1/payments.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models import Payment
from schemas import PaymentCreate, PaymentCustomerOut, PaymentOut, PaymentUpdate
from utils.sequencer import next_number

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("", response_model=List[PaymentOut])
def list_payments(
    search: Optional[str] = Query(None, description="Customer name, number or receipt number"),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    q = db.query(Payment)
    if search and search.strip():
        like = f"%{search.strip()}%"
        q = q.filter(or_(
            Payment.customer_name.ilike(like),
            Payment.customer_number.ilike(like),
            Payment.receipt_number.ilike(like),
        ))
    if status:
        q = q.filter(Payment.status == status.upper())
    return q.order_by(Payment.created_at.desc(), Payment.id.desc()).all()


@router.get("/customers", response_model=List[PaymentCustomerOut])
def payment_customers(db: Session = Depends(get_db)):
    """Payments grouped per (name, number), most recent payer first."""
    rows = (
        db.query(
            Payment.customer_name,
            Payment.customer_number,
            func.count(Payment.id).label("total_payments"),
            func.sum(Payment.amount).label("total_amount"),
            func.max(Payment.created_at).label("last_payment_date"),
        )
        .group_by(Payment.customer_name, Payment.customer_number)
        .order_by(func.max(Payment.created_at).desc())
        .all()
    )
    return [
        {
            "customer_name": r.customer_name,
            "customer_number": r.customer_number,
            "total_payments": r.total_payments,
            "total_amount": r.total_amount,
            "last_payment_date": r.last_payment_date,
        }
        for r in rows
    ]


@router.post("", response_model=PaymentOut, status_code=201)
def create_payment(payload: PaymentCreate, db: Session = Depends(get_db)):
    receipt = (payload.receipt_number or "").strip() or next_number(db, "RCP")
    if db.query(Payment.id).filter(Payment.receipt_number == receipt).first():
        raise HTTPException(400, "Receipt number already exists")

    data = payload.model_dump()
    data["receipt_number"] = receipt
    data["customer_name"] = payload.customer_name.strip()
    data["customer_number"] = payload.customer_number.strip()
    if payload.payment_method == "CASH" and not (payload.transaction_id or "").strip():
        data["transaction_id"] = None
    p = Payment(**data)
    try:
        db.add(p); db.commit(); db.refresh(p)
    except IntegrityError:
        db.rollback()
        raise HTTPException(400, "Receipt number already exists")
    logger.info("Payment %s recorded: %s from %s", p.receipt_number, p.amount, p.customer_number)
    return p


@router.get("/{payment_id}", response_model=PaymentOut)
def get_payment(payment_id: int, db: Session = Depends(get_db)):
    p = db.get(Payment, payment_id)
    if not p:
        raise HTTPException(404, "Payment not found")
    return p


@router.put("/{payment_id}", response_model=PaymentOut)
def update_payment(payment_id: int, payload: PaymentUpdate, db: Session = Depends(get_db)):
    p = db.get(Payment, payment_id)
    if not p:
        raise HTTPException(404, "Payment not found")
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(p, k, v)
    db.commit(); db.refresh(p)
    return p


@router.delete("/{payment_id}")
def delete_payment(payment_id: int, db: Session = Depends(get_db)):
    p = db.get(Payment, payment_id)
    if not p:
        raise HTTPException(404, "Payment not found")
    db.delete(p)
    db.commit()
    return {"message": "Payment deleted"}
