# routers/v1/credit_notes.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models import CreditNote, Customer
from schemas import CreditNoteCreate, CreditNoteOut, CreditNoteUpdate
from services.vendor_ledger import check_credit_note_transition
from utils.sequencer import next_number

router = APIRouter(prefix="/credit-notes", tags=["credit-notes"])


@router.get("", response_model=List[CreditNoteOut])
def list_credit_notes(
    search: Optional[str] = Query(None, description="Credit note number, invoice number or customer name"),
    status: Optional[str] = Query(None),
    customer_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    q = db.query(CreditNote).join(Customer, CreditNote.customer_id == Customer.id)
    if search and search.strip():
        like = f"%{search.strip()}%"
        q = q.filter(or_(
            CreditNote.credit_note_number.ilike(like),
            CreditNote.invoice_number.ilike(like),
            Customer.name.ilike(like),
        ))
    if status:
        q = q.filter(CreditNote.status == status.upper())
    if customer_id:
        q = q.filter(CreditNote.customer_id == customer_id)
    return q.order_by(CreditNote.issue_date.desc(), CreditNote.id.desc()).all()


@router.post("", response_model=CreditNoteOut, status_code=201)
def create_credit_note(payload: CreditNoteCreate, db: Session = Depends(get_db)):
    if not db.get(Customer, payload.customer_id):
        raise HTTPException(404, "Customer not found")
    number = (payload.credit_note_number or "").strip() or next_number(db, "CN")
    if db.query(CreditNote.id).filter(CreditNote.credit_note_number == number).first():
        raise HTTPException(400, "Credit note number already exists")

    data = payload.model_dump()
    data["credit_note_number"] = number
    data["issue_date"] = payload.issue_date or date.today()
    data["total_amount"] = payload.amount + payload.tax_amount
    cn = CreditNote(**data)
    try:
        db.add(cn); db.commit(); db.refresh(cn)
    except IntegrityError:
        db.rollback()
        raise HTTPException(400, "Credit note number already exists")
    return cn


@router.put("/{credit_note_id}", response_model=CreditNoteOut)
def update_credit_note(credit_note_id: int, payload: CreditNoteUpdate, db: Session = Depends(get_db)):
    cn = db.get(CreditNote, credit_note_id)
    if not cn:
        raise HTTPException(404, "Credit note not found")
    data = payload.model_dump(exclude_unset=True)
    if data.get("status"):
        check_credit_note_transition(cn.status, data["status"])
    for k, v in data.items():
        setattr(cn, k, v)
    db.commit(); db.refresh(cn)
    return cn


@router.delete("/{credit_note_id}")
def delete_credit_note(credit_note_id: int, db: Session = Depends(get_db)):
    cn = db.get(CreditNote, credit_note_id)
    if not cn:
        raise HTTPException(404, "Credit note not found")
    if cn.status != "DRAFT":
        raise HTTPException(400, "Only draft credit notes can be deleted")
    db.delete(cn)
    db.commit()
    return {"message": "Credit note deleted"}
