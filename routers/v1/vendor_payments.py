# routers/v1/vendor_payments.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models import Vendor, VendorPayment
from schemas import VendorPaymentCreate, VendorPaymentOut, VendorPaymentUpdate
from utils.sequencer import next_number

router = APIRouter(prefix="/vendor-payments", tags=["vendor-payments"])


@router.get("", response_model=List[VendorPaymentOut])
def list_vendor_payments(
    search: Optional[str] = Query(None, description="Reference, transaction id, product or vendor name"),
    vendor_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    q = db.query(VendorPayment).join(Vendor, VendorPayment.vendor_id == Vendor.id)
    if search and search.strip():
        like = f"%{search.strip()}%"
        q = q.filter(or_(
            VendorPayment.reference_number.ilike(like),
            VendorPayment.transaction_id.ilike(like),
            VendorPayment.product_name.ilike(like),
            Vendor.name.ilike(like),
        ))
    if vendor_id:
        q = q.filter(VendorPayment.vendor_id == vendor_id)
    if status:
        q = q.filter(VendorPayment.status == status.upper())
    return q.order_by(VendorPayment.payment_date.desc(), VendorPayment.id.desc()).all()


@router.post("", response_model=VendorPaymentOut, status_code=201)
def create_vendor_payment(payload: VendorPaymentCreate, db: Session = Depends(get_db)):
    if not db.get(Vendor, payload.vendor_id):
        raise HTTPException(404, "Vendor not found")
    ref = (payload.reference_number or "").strip() or next_number(db, "VPMT")
    if db.query(VendorPayment.id).filter(VendorPayment.reference_number == ref).first():
        raise HTTPException(400, "Reference number already exists")

    data = payload.model_dump()
    data["reference_number"] = ref
    data["payment_date"] = payload.payment_date or date.today()
    p = VendorPayment(**data)
    try:
        db.add(p); db.commit(); db.refresh(p)
    except IntegrityError:
        db.rollback()
        raise HTTPException(400, "Reference number already exists")
    return p


@router.get("/{payment_id}", response_model=VendorPaymentOut)
def get_vendor_payment(payment_id: int, db: Session = Depends(get_db)):
    p = db.get(VendorPayment, payment_id)
    if not p:
        raise HTTPException(404, "Payment not found")
    return p


@router.put("/{payment_id}", response_model=VendorPaymentOut)
def update_vendor_payment(payment_id: int, payload: VendorPaymentUpdate, db: Session = Depends(get_db)):
    p = db.get(VendorPayment, payment_id)
    if not p:
        raise HTTPException(404, "Payment not found")
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(p, k, v)
    db.commit(); db.refresh(p)
    return p
