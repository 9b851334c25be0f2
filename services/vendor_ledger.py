# services/vendor_ledger.py
import logging
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from models import Payment, Vendor, VendorBill, VendorCreditNote, VendorPayment
from services.errors import LedgerError, NotFound, TransitionError
from services.pricing import money
from utils.sequencer import next_number

logger = logging.getLogger(__name__)

BILL_STATUSES = {"DRAFT", "PENDING", "PARTIAL", "PAID", "OVERDUE", "CANCELLED"}
VENDOR_PAYMENT_METHODS = {"CASH", "UPI", "BANK_TRANSFER", "CHEQUE", "CARD"}
VENDOR_PAYMENT_STATUSES = {"PAID", "DUE", "OVERDUE", "PARTIAL"}
CREDIT_NOTE_STATUSES = {"DRAFT", "ISSUED", "APPLIED", "CANCELLED"}

CREDIT_NOTE_TRANSITIONS = {
    "DRAFT": {"ISSUED", "CANCELLED"},
    "ISSUED": {"APPLIED", "CANCELLED"},
}


def bill_status(amount_paid, balance_due) -> str:
    if Decimal(balance_due) <= 0:
        return "PAID"
    if Decimal(amount_paid) > 0:
        return "PARTIAL"
    return "PENDING"


def check_credit_note_transition(current: str, target: str) -> None:
    if target not in CREDIT_NOTE_STATUSES:
        raise LedgerError(f"Invalid status: {target}")
    if target != current and target not in CREDIT_NOTE_TRANSITIONS.get(current, set()):
        raise TransitionError(f"Cannot change status from {current} to {target}")


def _settle(bill: VendorBill, amount: Decimal) -> None:
    bill.amount_paid = money(Decimal(bill.amount_paid) + amount)
    bill.balance_due = money(Decimal(bill.balance_due) - amount)
    bill.status = bill_status(bill.amount_paid, bill.balance_due)


def _check_open(bill: VendorBill, amount: Decimal, what: str) -> None:
    if bill.status == "CANCELLED":
        raise LedgerError("Bill is cancelled")
    if amount <= 0:
        raise LedgerError(f"{what} must be greater than 0")
    if amount > Decimal(bill.balance_due):
        raise LedgerError(
            f"{what} ({money(amount)}) cannot exceed bill balance ({money(bill.balance_due)})"
        )


def record_bill_payment(
    db: Session,
    bill: VendorBill,
    *,
    amount: Decimal,
    payment_method: str,
    transaction_id: str | None = None,
    payment_date: date | None = None,
    notes: str | None = None,
) -> VendorPayment:
    """Pay (part of) a bill: bill balance and a VPMT payment row move together."""
    amount = money(amount)
    _check_open(bill, amount, "Payment amount")
    if payment_method not in VENDOR_PAYMENT_METHODS:
        raise LedgerError(f"Invalid payment method: {payment_method}")

    _settle(bill, amount)
    payment = VendorPayment(
        vendor_id=bill.vendor_id,
        amount=amount,
        payment_method=payment_method,
        transaction_id=transaction_id,
        reference_number=next_number(db, "VPMT"),
        payment_date=payment_date or date.today(),
        bill_numbers=[bill.bill_number],
        status="PAID",
        notes=notes or f"Payment for bill {bill.bill_number}",
    )
    db.add(payment)
    db.flush()
    logger.info("Bill %s paid %s (balance %s, %s)", bill.bill_number, amount, bill.balance_due, bill.status)
    return payment


def _partial_number(db: Session, base: str) -> str:
    """<base>-PARTIAL, then <base>-PARTIAL-2, -3 ... on repeated partial use."""
    number = f"{base}-PARTIAL"
    n = 1
    while db.query(VendorCreditNote.id).filter(VendorCreditNote.credit_note_number == number).first():
        n += 1
        number = f"{base}-PARTIAL-{n}"
    return number


def apply_credit_notes(db: Session, bill: VendorBill, applications: list[dict]) -> dict:
    """
    Apply vendor credit notes to a bill.

    applications: [{credit_note_id, amount}]. A note applied for its whole
    amount becomes APPLIED; otherwise its amount shrinks and an APPLIED
    "<number>-PARTIAL" child note records the applied part.
    """
    if not applications:
        raise LedgerError("Please enter valid amounts to apply")

    seen = set()
    plan = []
    for app in applications:
        note_id = app["credit_note_id"]
        if note_id in seen:
            raise LedgerError(f"Credit note {note_id} listed twice")
        seen.add(note_id)

        note = db.get(VendorCreditNote, note_id, with_for_update=True)
        if not note:
            raise NotFound(f"Credit note {note_id} not found")
        if note.vendor_id != bill.vendor_id:
            raise LedgerError(f"Credit note {note.credit_note_number} belongs to another vendor")
        if note.status in ("APPLIED", "CANCELLED"):
            raise LedgerError(f"Credit note {note.credit_note_number} is {note.status}")

        amount = money(app["amount"])
        if amount <= 0:
            raise LedgerError("Amount to apply must be greater than 0")
        if amount > Decimal(note.amount):
            raise LedgerError(
                f"Amount to apply ({amount}) exceeds credit note {note.credit_note_number} ({money(note.amount)})"
            )
        plan.append((note, amount))

    total = sum((a for _, a in plan), Decimal("0"))
    _check_open(bill, total, "Total amount to apply")

    now = datetime.now(timezone.utc)
    applied = []
    for note, amount in plan:
        if amount == Decimal(note.amount):
            note.status = "APPLIED"
            note.applied_to_bill = bill.bill_number
            note.applied_bill_id = bill.id
            note.applied_date = now
            applied.append(note)
            continue

        remaining = money(Decimal(note.amount) - amount)
        note.amount = remaining
        note.total_amount = money(remaining + Decimal(note.tax_amount or 0))
        line = f"Partially applied: {amount} to bill {bill.bill_number}"
        note.notes = f"{note.notes}\n{line}" if note.notes else line

        child = VendorCreditNote(
            vendor_id=note.vendor_id,
            credit_note_number=_partial_number(db, note.credit_note_number),
            bill_number=bill.bill_number,
            reason=f"Partial application from {note.credit_note_number}",
            amount=amount,
            tax_amount=0,
            total_amount=amount,
            status="APPLIED",
            applied_to_bill=bill.bill_number,
            applied_bill_id=bill.id,
            applied_date=now,
            notes=f"Partial application ({amount}) from credit note {note.credit_note_number}",
            original_credit_note_id=note.id,
        )
        db.add(child)
        applied.append(child)

    _settle(bill, total)
    db.flush()
    logger.info("Applied %s credit to bill %s (balance %s)", total, bill.bill_number, bill.balance_due)
    return {"bill": bill, "total_applied": total, "credit_notes": applied}


def vendor_history(db: Session, vendor_id: int) -> dict:
    vendor = db.get(Vendor, vendor_id)
    if not vendor:
        raise NotFound("Vendor not found")

    bills = (
        db.query(VendorBill).filter(VendorBill.vendor_id == vendor.id)
        .order_by(VendorBill.bill_date.desc(), VendorBill.id.desc()).all()
    )
    payments = (
        db.query(VendorPayment).filter(VendorPayment.vendor_id == vendor.id)
        .order_by(VendorPayment.payment_date.desc(), VendorPayment.id.desc()).all()
    )
    notes = (
        db.query(VendorCreditNote).filter(VendorCreditNote.vendor_id == vendor.id)
        .order_by(VendorCreditNote.issue_date.desc(), VendorCreditNote.id.desc()).all()
    )

    zero = Decimal("0")
    total_bills = sum((Decimal(b.total_amount) for b in bills if b.status != "CANCELLED"), zero)
    total_payments = sum((Decimal(p.amount) for p in payments), zero)
    # children of partial applications are already deducted from their parent
    total_credits = sum(
        (Decimal(n.total_amount) for n in notes if n.status != "CANCELLED"),
        zero,
    )
    outstanding = sum((Decimal(b.balance_due) for b in bills if b.status != "CANCELLED"), zero)
    opening = Decimal(vendor.opening_balance or 0)
    current = total_bills - total_payments - total_credits + opening
    limit = Decimal(vendor.credit_limit or 0)
    utilization = money(current / limit * 100) if limit > 0 else zero

    return {
        "vendor": vendor,
        "bills": bills,
        "payments": payments,
        "credit_notes": notes,
        "summary": {
            "total_bills": money(total_bills),
            "total_payments": money(total_payments),
            "total_credit_notes": money(total_credits),
            "outstanding_balance": money(outstanding),
            "opening_balance": money(opening),
            "current_balance": money(current),
            "credit_limit": money(limit),
            "credit_utilization": utilization,
        },
    }


def mark_overdue(db: Session, today: date | None = None) -> dict:
    """Flag open vendor bills and DUE customer payments whose due date has passed."""
    today = today or date.today()
    bills = (
        db.query(VendorBill)
        .filter(
            VendorBill.status.in_(("PENDING", "PARTIAL")),
            VendorBill.due_date.isnot(None),
            VendorBill.due_date < today,
            VendorBill.balance_due > 0,
        )
        .update({VendorBill.status: "OVERDUE"}, synchronize_session=False)
    )
    payments = (
        db.query(Payment)
        .filter(Payment.status == "DUE", Payment.due_date.isnot(None), Payment.due_date < today)
        .update({Payment.status: "OVERDUE"}, synchronize_session=False)
    )
    vendor_payments = (
        db.query(VendorPayment)
        .filter(VendorPayment.status == "DUE", VendorPayment.due_date.isnot(None), VendorPayment.due_date < today)
        .update({VendorPayment.status: "OVERDUE"}, synchronize_session=False)
    )
    counts = {"vendor_bills": bills, "payments": payments, "vendor_payments": vendor_payments}
    logger.info("Overdue sweep %s: %s", today.isoformat(), counts)
    return counts
