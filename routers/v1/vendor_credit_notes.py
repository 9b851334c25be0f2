# routers/v1/vendor_credit_notes.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models import Vendor, VendorCreditNote
from schemas import VendorCreditNoteCreate, VendorCreditNoteOut, VendorCreditNoteUpdate
from services.vendor_ledger import check_credit_note_transition
from utils.sequencer import next_number

router = APIRouter(prefix="/vendor-credit-notes", tags=["vendor-credit-notes"])


@router.get("", response_model=List[VendorCreditNoteOut])
def list_vendor_credit_notes(
    search: Optional[str] = Query(None, description="Credit note number, bill number or vendor name"),
    vendor_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    unapplied: bool = Query(False, description="Only notes that can still be applied"),
    db: Session = Depends(get_db),
):
    q = db.query(VendorCreditNote).join(Vendor, VendorCreditNote.vendor_id == Vendor.id)
    if search and search.strip():
        like = f"%{search.strip()}%"
        q = q.filter(or_(
            VendorCreditNote.credit_note_number.ilike(like),
            VendorCreditNote.bill_number.ilike(like),
            Vendor.name.ilike(like),
        ))
    if vendor_id:
        q = q.filter(VendorCreditNote.vendor_id == vendor_id)
    if status:
        q = q.filter(VendorCreditNote.status == status.upper())
    if unapplied:
        q = q.filter(VendorCreditNote.status.in_(("DRAFT", "ISSUED")))
    return q.order_by(VendorCreditNote.issue_date.desc(), VendorCreditNote.id.desc()).all()


@router.post("", response_model=VendorCreditNoteOut, status_code=201)
def create_vendor_credit_note(payload: VendorCreditNoteCreate, db: Session = Depends(get_db)):
    if not db.get(Vendor, payload.vendor_id):
        raise HTTPException(404, "Vendor not found")
    number = (payload.credit_note_number or "").strip() or next_number(db, "VCN")
    if db.query(VendorCreditNote.id).filter(VendorCreditNote.credit_note_number == number).first():
        raise HTTPException(400, "Credit note number already exists")

    data = payload.model_dump()
    data["credit_note_number"] = number
    data["issue_date"] = payload.issue_date or date.today()
    data["total_amount"] = payload.amount + payload.tax_amount
    cn = VendorCreditNote(**data)
    try:
        db.add(cn); db.commit(); db.refresh(cn)
    except IntegrityError:
        db.rollback()
        raise HTTPException(400, "Credit note number already exists")
    return cn


@router.get("/{credit_note_id}", response_model=VendorCreditNoteOut)
def get_vendor_credit_note(credit_note_id: int, db: Session = Depends(get_db)):
    cn = db.get(VendorCreditNote, credit_note_id)
    if not cn:
        raise HTTPException(404, "Credit note not found")
    return cn


@router.put("/{credit_note_id}", response_model=VendorCreditNoteOut)
def update_vendor_credit_note(credit_note_id: int, payload: VendorCreditNoteUpdate, db: Session = Depends(get_db)):
    cn = db.get(VendorCreditNote, credit_note_id)
    if not cn:
        raise HTTPException(404, "Credit note not found")
    data = payload.model_dump(exclude_unset=True)
    if data.get("status"):
        if data["status"] == "APPLIED" and data["status"] != cn.status:
            raise HTTPException(400, "Apply credit notes through /vendor-bills/{id}/apply-credit")
        check_credit_note_transition(cn.status, data["status"])
    for k, v in data.items():
        setattr(cn, k, v)
    db.commit(); db.refresh(cn)
    return cn


@router.delete("/{credit_note_id}")
def delete_vendor_credit_note(credit_note_id: int, db: Session = Depends(get_db)):
    cn = db.get(VendorCreditNote, credit_note_id)
    if not cn:
        raise HTTPException(404, "Credit note not found")
    if cn.status != "DRAFT":
        raise HTTPException(400, "Only draft credit notes can be deleted")
    db.delete(cn)
    db.commit()
    return {"message": "Credit note deleted"}
