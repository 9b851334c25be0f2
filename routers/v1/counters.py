# routers/v1/counters.py
"""
Financial-year document counters.

GET  /<name>        next number, not consumed
POST /<name>        consume and return the next number
POST /<name>/sync   realign the counter with the highest number already stored
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models import CreditNote, Invoice, Payment, VendorBill, VendorCreditNote, VendorPayment
from schemas import CounterOut, CounterSyncOut
from utils.code_generator import highest_number
from utils.sequencer import financial_year, next_number, peek_number, set_counter


def _counter_router(name: str, doc_type: str, model, field: str) -> APIRouter:
    r = APIRouter(prefix=f"/{name}", tags=["counters"])

    @r.get("", response_model=CounterOut)
    def peek(db: Session = Depends(get_db)):
        return {"doc_type": doc_type, "financial_year": financial_year(), "number": peek_number(db, doc_type)}

    @r.post("", response_model=CounterOut)
    def allocate(db: Session = Depends(get_db)):
        number = next_number(db, doc_type)
        db.commit()
        return {"doc_type": doc_type, "financial_year": financial_year(), "number": number}

    @r.post("/sync", response_model=CounterSyncOut)
    def sync(db: Session = Depends(get_db)):
        fy = financial_year()
        seq = highest_number(db, model, field, fy)
        set_counter(db, doc_type, seq)
        db.commit()
        return {
            "doc_type": doc_type,
            "financial_year": fy,
            "seq": seq,
            "next_number": peek_number(db, doc_type),
        }

    return r


receipt_router = _counter_router("receipt-counter", "RCP", Payment, "receipt_number")
invoice_router = _counter_router("invoice-counter", "INV", Invoice, "invoice_number")
bill_router = _counter_router("bill-counter", "BILL", VendorBill, "bill_number")
vendor_payment_router = _counter_router("vendor-payment-counter", "VPMT", VendorPayment, "reference_number")
vendor_credit_note_router = _counter_router("vendor-credit-note-counter", "VCN", VendorCreditNote, "credit_note_number")
credit_note_router = _counter_router("credit-note-counter", "CN", CreditNote, "credit_note_number")

routers = [
    receipt_router,
    invoice_router,
    bill_router,
    vendor_payment_router,
    vendor_credit_note_router,
    credit_note_router,
]
