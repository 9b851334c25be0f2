# services/invoicing.py
"""Invoice lifecycle: totals always come from services.pricing, stock moves with the invoice."""
import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from models import Customer, Invoice, InvoiceItem, Payment
from services import inventory
from services.errors import DomainError, StockError
from services.pricing import LineInput, calculate_invoice, money, payment_status
from utils.sequencer import next_number

logger = logging.getLogger(__name__)


def upsert_customer(db: Session, data: dict) -> Customer:
    """Customers are keyed by phone number; known numbers get their details refreshed."""
    number = data["number"].strip()
    c = db.query(Customer).filter(Customer.number == number).first()
    if c is None:
        c = Customer(number=number, name=data["name"].strip())
        db.add(c)
    for k in ("name", "email", "address", "city", "pincode", "gstin"):
        v = data.get(k)
        if v:
            setattr(c, k, v.strip() if isinstance(v, str) else v)
    db.flush()
    return c


def _price(db: Session, items: list[dict], *, company_type, gst_applied, overall_discount,
           extra_charges, advance_paid):
    products = {}
    lines = []
    for it in items:
        pid = it.get("product_id")
        if pid is not None and pid not in products:
            products[pid] = inventory.get_product(db, pid, lock=True)
        item_gst = it.get("gst_applied")
        lines.append(LineInput(
            base_price=Decimal(it["base_price"]),
            quantity=Decimal(it["quantity"]),
            discount_pct=it.get("discount_pct"),
            gst_applied=gst_applied and (item_gst if item_gst is not None else True),
        ))
    totals = calculate_invoice(
        lines,
        company_type,
        overall_discount=overall_discount,
        extra_charges=extra_charges,
        advance_paid=advance_paid,
    )
    return totals, products


def _build_items(items: list[dict], totals, products: dict) -> list[InvoiceItem]:
    rows = []
    for it, line in zip(items, totals.lines):
        product = products.get(it.get("product_id"))
        rows.append(InvoiceItem(
            product_id=product.id if product else None,
            name=(it.get("name") or (product.name if product else "")).strip(),
            description=it.get("description"),
            hsn=it.get("hsn"),
            unit=it.get("unit"),
            quantity=line.quantity,
            base_price=line.base_price,
            price=line.price,
            discount_pct=it.get("discount_pct"),
            discount_amount=line.discount_amount,
            gst_applied=line.gst_applied,
            subtotal=line.subtotal,
            cgst=line.cgst,
            sgst=line.sgst,
            total=line.total,
        ))
    return rows


def _product_qty(items) -> dict[int, Decimal]:
    out = defaultdict(Decimal)
    for it in items:
        pid = it.product_id if isinstance(it, InvoiceItem) else it.get("product_id")
        qty = it.quantity if isinstance(it, InvoiceItem) else it["quantity"]
        if pid is not None:
            out[pid] += Decimal(qty)
    return out


def _deduct_stock(db: Session, items: list[dict], products: dict) -> None:
    # every product is checked before any is deducted
    need = _product_qty(items)
    for pid, qty in need.items():
        p = products[pid]
        if Decimal(p.quantity) < qty:
            raise StockError(
                f"Insufficient stock for {p.name}. "
                f"Available: {inventory.fmt_qty(p.quantity)}, Requested: {inventory.fmt_qty(qty)}"
            )
    for pid, qty in need.items():
        inventory.take_product(db, products[pid], qty)


def _restore_stock(db: Session, items: list[InvoiceItem]) -> None:
    for pid, qty in _product_qty(items).items():
        product = inventory.get_product(db, pid, lock=True)
        inventory.put_product(db, product, qty)


def _apply_totals(inv: Invoice, totals, status: str | None) -> None:
    inv.subtotal = totals.subtotal
    inv.discount_total = totals.discount_total
    inv.cgst = totals.cgst
    inv.sgst = totals.sgst
    inv.extra_charges = totals.extra_charges
    inv.total = totals.total
    inv.advance_paid = totals.advance_paid
    inv.balance_due = totals.balance_due
    inv.total_in_words = totals.total_in_words
    inv.status = status or totals.status


def create_invoice(db: Session, data: dict) -> Invoice:
    items = data["items"]
    totals, products = _price(
        db, items,
        company_type=data.get("company_type") or "RUDRA",
        gst_applied=data.get("gst_applied", True),
        overall_discount=data.get("overall_discount") or 0,
        extra_charges=data.get("extra_charges") or 0,
        advance_paid=data.get("advance_paid") or 0,
    )
    _deduct_stock(db, items, products)

    customer = upsert_customer(db, data["customer"])
    number = (data.get("invoice_number") or "").strip() or next_number(db, "INV")
    if db.query(Invoice.id).filter(Invoice.invoice_number == number).first():
        raise DomainError(f"Invoice number {number} already exists")

    shipping = data.get("shipping") or {}
    inv = Invoice(
        invoice_number=number,
        invoice_date=data.get("invoice_date") or date.today(),
        due_date=data.get("due_date"),
        delivery_date=data.get("delivery_date"),
        customer_id=customer.id,
        shipping_name=shipping.get("name") or customer.name,
        shipping_address=shipping.get("address") or customer.address,
        company_type=totals.company.code,
        gst_applied=data.get("gst_applied", True),
        overall_discount=Decimal(data.get("overall_discount") or 0),
        description=data.get("description"),
    )
    _apply_totals(inv, totals, data.get("status"))
    inv.items = _build_items(items, totals, products)
    db.add(inv)
    db.flush()
    logger.info("Invoice %s created for %s: total %s (%s)", inv.invoice_number, customer.number, inv.total, inv.status)
    return inv


def update_invoice(db: Session, inv: Invoice, data: dict) -> Invoice:
    """Re-price with the merged values; when items change, stock is re-balanced."""
    company_type = data.get("company_type") or inv.company_type
    gst_applied = inv.gst_applied if data.get("gst_applied") is None else data["gst_applied"]
    overall = inv.overall_discount if data.get("overall_discount") is None else data["overall_discount"]
    extra = inv.extra_charges if data.get("extra_charges") is None else data["extra_charges"]
    advance = inv.advance_paid if data.get("advance_paid") is None else data["advance_paid"]

    new_items = data.get("items")
    if new_items is None:
        new_items = [
            {
                "product_id": i.product_id,
                "name": i.name,
                "description": i.description,
                "hsn": i.hsn,
                "unit": i.unit,
                "quantity": i.quantity,
                "base_price": i.base_price,
                "discount_pct": i.discount_pct,
                "gst_applied": i.gst_applied,
            }
            for i in inv.items
        ]
        restock = False
    else:
        restock = True

    if restock and inv.items:
        _restore_stock(db, list(inv.items))

    totals, products = _price(
        db, new_items,
        company_type=company_type,
        gst_applied=gst_applied,
        overall_discount=overall,
        extra_charges=extra,
        advance_paid=advance,
    )
    if restock:
        _deduct_stock(db, new_items, products)
        inv.items = _build_items(new_items, totals, products)
    else:
        for row, line in zip(inv.items, totals.lines):
            row.base_price = line.base_price
            row.price = line.price
            row.discount_amount = line.discount_amount
            row.gst_applied = line.gst_applied
            row.subtotal = line.subtotal
            row.cgst = line.cgst
            row.sgst = line.sgst
            row.total = line.total

    inv.company_type = totals.company.code
    inv.gst_applied = gst_applied
    inv.overall_discount = Decimal(overall)
    for k in ("due_date", "delivery_date", "description"):
        if k in data and data[k] is not None:
            setattr(inv, k, data[k])
    shipping = data.get("shipping")
    if shipping:
        inv.shipping_name = shipping.get("name") or inv.shipping_name
        inv.shipping_address = shipping.get("address") or inv.shipping_address

    _apply_totals(inv, totals, data.get("status"))
    db.flush()
    logger.info("Invoice %s updated: total %s balance %s (%s)", inv.invoice_number, inv.total, inv.balance_due, inv.status)
    return inv


def delete_invoice(db: Session, inv: Invoice) -> None:
    if inv.items:
        _restore_stock(db, list(inv.items))
    logger.info("Invoice %s deleted, stock restored", inv.invoice_number)
    db.delete(inv)
    db.flush()


def record_invoice_payment(
    db: Session,
    inv: Invoice,
    *,
    amount: Decimal,
    payment_method: str = "CASH",
    transaction_id: str | None = None,
    record_receipt: bool = True,
) -> Payment | None:
    """Add a payment to an invoice's advance; optionally book a receipt for it."""
    amount = money(amount)
    if amount <= 0:
        raise DomainError("Payment amount must be greater than 0")
    if payment_method != "CASH" and not (transaction_id or "").strip():
        raise DomainError("Transaction ID is required for non-cash payments")

    inv.advance_paid = money(Decimal(inv.advance_paid) + amount)
    inv.balance_due = money(Decimal(inv.total) - Decimal(inv.advance_paid))
    inv.status = payment_status(inv.total, inv.advance_paid)

    payment = None
    if record_receipt:
        payment = Payment(
            customer_name=inv.customer.name,
            customer_number=inv.customer.number,
            amount=amount,
            payment_method=payment_method,
            transaction_id=transaction_id,
            receipt_number=next_number(db, "RCP"),
            status="COMPLETED",
            description=f"Payment for invoice {inv.invoice_number}",
        )
        db.add(payment)
    db.flush()
    logger.info("Invoice %s payment %s (balance %s, %s)", inv.invoice_number, amount, inv.balance_due, inv.status)
    return payment
