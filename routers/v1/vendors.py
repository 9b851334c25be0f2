# routers/v1/vendors.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models import Vendor
from schemas import VendorCreate, VendorHistoryOut, VendorOut, VendorPage, VendorUpdate
from services.vendor_ledger import vendor_history
from utils.paging import paginate

router = APIRouter(prefix="/vendors", tags=["vendors"])


def _clean_gstin(v: Optional[str]) -> Optional[str]:
    v = (v or "").strip().upper()
    return v or None


@router.get("", response_model=VendorPage)
def list_vendors(
    q: Optional[str] = Query(None, description="Search by name, company, email or GSTIN (ilike)"),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(20, ge=1, le=1000),
    all: bool = Query(False),
    db: Session = Depends(get_db),
):
    base_q = db.query(Vendor)
    if q and q.strip():
        like = f"%{q.strip()}%"
        base_q = base_q.filter(or_(
            Vendor.name.ilike(like),
            Vendor.company_name.ilike(like),
            Vendor.email.ilike(like),
            Vendor.gstin.ilike(like),
        ))
    return paginate(base_q.order_by(Vendor.name.asc(), Vendor.id.asc()), page, per_page, all)


@router.post("", response_model=VendorOut, status_code=201)
def create_vendor(payload: VendorCreate, db: Session = Depends(get_db)):
    data = payload.model_dump()
    data["name"] = payload.name.strip()
    data["gstin"] = _clean_gstin(payload.gstin)
    if data["gstin"] and db.query(Vendor.id).filter(Vendor.gstin == data["gstin"]).first():
        raise HTTPException(400, "Vendor with this GSTIN already exists")
    v = Vendor(**data)
    try:
        db.add(v); db.commit(); db.refresh(v)
    except IntegrityError:
        db.rollback()
        raise HTTPException(400, "Vendor with this GSTIN already exists")
    return v


@router.get("/{vendor_id}", response_model=VendorOut)
def get_vendor(vendor_id: int, db: Session = Depends(get_db)):
    v = db.get(Vendor, vendor_id)
    if not v:
        raise HTTPException(404, "Vendor not found")
    return v


@router.get("/{vendor_id}/history", response_model=VendorHistoryOut)
def get_vendor_history(vendor_id: int, db: Session = Depends(get_db)):
    return vendor_history(db, vendor_id)


@router.put("/{vendor_id}", response_model=VendorOut)
def update_vendor(vendor_id: int, payload: VendorUpdate, db: Session = Depends(get_db)):
    v = db.get(Vendor, vendor_id)
    if not v:
        raise HTTPException(404, "Vendor not found")
    for k, val in payload.model_dump(exclude_unset=True).items():
        if k == "gstin":
            val = _clean_gstin(val)
        setattr(v, k, val)
    try:
        db.commit(); db.refresh(v)
    except IntegrityError:
        db.rollback()
        raise HTTPException(400, "Vendor with this GSTIN already exists")
    return v


@router.delete("/{vendor_id}")
def delete_vendor(vendor_id: int, db: Session = Depends(get_db)):
    v = db.get(Vendor, vendor_id)
    if not v:
        raise HTTPException(404, "Vendor not found")
    if v.bills or v.payments or v.credit_notes:
        raise HTTPException(400, "Vendor has bills, payments or credit notes; cannot delete")
    db.delete(v)
    db.commit()
    return {"message": "Vendor deleted"}
