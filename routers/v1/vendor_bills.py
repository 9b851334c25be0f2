# routers/v1/vendor_bills.py
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models import Vendor, VendorBill
from schemas import (
    ApplyCreditIn,
    ApplyCreditOut,
    BillPaymentIn,
    BillPaymentOut,
    VendorBillCreate,
    VendorBillOut,
    VendorBillPage,
    VendorBillUpdate,
)
from services.vendor_ledger import apply_credit_notes, bill_status, record_bill_payment
from utils.paging import paginate
from utils.sequencer import next_number

router = APIRouter(prefix="/vendor-bills", tags=["vendor-bills"])


def _get(db: Session, bill_id: int, lock: bool = False) -> VendorBill:
    b = db.get(VendorBill, bill_id, with_for_update=lock)
    if not b:
        raise HTTPException(404, "Bill not found")
    return b


@router.get("", response_model=VendorBillPage)
def list_bills(
    q: Optional[str] = Query(None, description="Search by bill number or vendor name"),
    status: Optional[str] = Query(None),
    vendor_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(20, ge=1, le=1000),
    all: bool = Query(False),
    db: Session = Depends(get_db),
):
    base_q = db.query(VendorBill).join(Vendor, VendorBill.vendor_id == Vendor.id)
    if q and q.strip():
        like = f"%{q.strip()}%"
        base_q = base_q.filter(or_(
            VendorBill.bill_number.ilike(like),
            Vendor.name.ilike(like),
            Vendor.company_name.ilike(like),
        ))
    if status:
        base_q = base_q.filter(VendorBill.status == status.upper())
    if vendor_id:
        base_q = base_q.filter(VendorBill.vendor_id == vendor_id)
    base_q = base_q.order_by(VendorBill.bill_date.desc(), VendorBill.id.desc())
    return paginate(base_q, page, per_page, all)


@router.post("", response_model=VendorBillOut, status_code=201)
def create_bill(payload: VendorBillCreate, db: Session = Depends(get_db)):
    if not db.get(Vendor, payload.vendor_id):
        raise HTTPException(404, "Vendor not found")
    number = (payload.bill_number or "").strip() or next_number(db, "BILL")
    if db.query(VendorBill.id).filter(VendorBill.bill_number == number).first():
        raise HTTPException(400, "Bill number already exists")

    data = payload.model_dump()
    data["bill_number"] = number
    data["bill_date"] = payload.bill_date or date.today()
    data["balance_due"] = payload.total_amount - payload.amount_paid
    data["status"] = payload.status or bill_status(payload.amount_paid, data["balance_due"])
    b = VendorBill(**data)
    try:
        db.add(b); db.commit(); db.refresh(b)
    except IntegrityError:
        db.rollback()
        raise HTTPException(400, "Bill number already exists")
    return b


@router.get("/{bill_id}", response_model=VendorBillOut)
def get_bill(bill_id: int, db: Session = Depends(get_db)):
    return _get(db, bill_id)


@router.put("/{bill_id}", response_model=VendorBillOut)
def update_bill(bill_id: int, payload: VendorBillUpdate, db: Session = Depends(get_db)):
    b = _get(db, bill_id, lock=True)
    data = payload.model_dump(exclude_unset=True)
    for k, v in data.items():
        setattr(b, k, v)

    total = Decimal(b.total_amount)
    paid = Decimal(b.amount_paid)
    if paid > total:
        raise HTTPException(400, "Amount paid cannot exceed total amount")
    if "amount_paid" in data or "total_amount" in data:
        b.balance_due = total - paid
        if "status" not in data and b.status not in ("DRAFT", "CANCELLED"):
            b.status = bill_status(paid, b.balance_due)
    db.commit(); db.refresh(b)
    return b


@router.post("/{bill_id}/pay", response_model=BillPaymentOut)
def pay_bill(bill_id: int, payload: BillPaymentIn, db: Session = Depends(get_db)):
    b = _get(db, bill_id, lock=True)
    payment = record_bill_payment(db, b, **payload.model_dump())
    db.commit()
    db.refresh(b); db.refresh(payment)
    return {"bill": b, "payment": payment}


@router.post("/{bill_id}/apply-credit", response_model=ApplyCreditOut)
def apply_credit(bill_id: int, payload: ApplyCreditIn, db: Session = Depends(get_db)):
    b = _get(db, bill_id, lock=True)
    result = apply_credit_notes(db, b, [a.model_dump() for a in payload.applications])
    db.commit()
    db.refresh(b)
    for n in result["credit_notes"]:
        db.refresh(n)
    return result


@router.delete("/{bill_id}")
def delete_bill(bill_id: int, db: Session = Depends(get_db)):
    b = _get(db, bill_id)
    if b.status != "DRAFT":
        raise HTTPException(400, "Only draft bills can be deleted")
    db.delete(b)
    db.commit()
    return {"message": "Bill deleted"}
