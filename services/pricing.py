# services/pricing.py
"""
Invoice price calculator.

Two billing companies share one calculator:

- RUDRA       : GST is added on top of the taxable value.
- YADNYASENI  : GST is embedded in the displayed price (price = base x 1.05)
                and extracted back out for the tax columns.

A line's discount is its own percentage when given, otherwise the invoice-wide
percentage. All money leaves this module rounded half-up to 2 places.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from config import settings
from services.amount_words import amount_in_words
from services.errors import DomainError

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


class PricingError(DomainError):
    pass


@dataclass(frozen=True)
class CompanyProfile:
    code: str
    name: str
    address: str
    gstin: str
    city: str
    phone: str
    email: str
    gst_inclusive: bool


_ADDRESS = "Samata Nagar, Ganesh Nagar Lane No 1, Famous Chowk, New Sangavi, Pune Maharashtra 411027, India"

COMPANIES = {
    "RUDRA": CompanyProfile(
        code="RUDRA",
        name="Rudra Arts & Handicrafts",
        address=_ADDRESS,
        gstin="27AMWPV8148A1ZE",
        city="Pune",
        phone="9595221296",
        email="rudraarts30@gmail.com",
        gst_inclusive=False,
    ),
    "YADNYASENI": CompanyProfile(
        code="YADNYASENI",
        name="Yadnyaseni Creations",
        address=_ADDRESS.replace(
            "Lane No 1,", "Lane No 1, Above Rudra arts & Handicrafts LLP,"
        ),
        gstin="",
        city="Pune",
        phone="9595221296",
        email="rudraarts30@gmail.com",
        gst_inclusive=True,
    ),
}


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _dec(value) -> Decimal:
    if value is None:
        return ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


def get_company(code: str) -> CompanyProfile:
    try:
        return COMPANIES[(code or "").upper()]
    except KeyError:
        raise PricingError(f"Unknown company type: {code}")


def _rate(gst_rate) -> Decimal:
    return _dec(settings.GST_RATE if gst_rate is None else gst_rate)


def effective_discount(item_pct, overall_pct) -> Decimal:
    """Item percentage overrides the overall one."""
    pct = _dec(item_pct) if item_pct is not None else _dec(overall_pct)
    if pct < 0 or pct > HUNDRED:
        raise PricingError("Discount must be between 0 and 100")
    return pct


def gst_inclusive_price(base_price, gst_rate=None) -> Decimal:
    """Displayed price of a GST-inclusive line: base x (1 + rate)."""
    return money(_dec(base_price) * (1 + _rate(gst_rate) / HUNDRED))


def base_from_inclusive(price, gst_rate=None) -> Decimal:
    """Reverse of gst_inclusive_price: price / (1 + rate)."""
    return money(_dec(price) / (1 + _rate(gst_rate) / HUNDRED))


def extract_gst(price, gst_rate=None) -> Decimal:
    """GST portion of an inclusive amount: price / (1 + rate) x rate."""
    rate = _rate(gst_rate) / HUNDRED
    return money(_dec(price) / (1 + rate) * rate)


@dataclass
class LineInput:
    base_price: Decimal
    quantity: Decimal
    discount_pct: Optional[Decimal] = None
    gst_applied: bool = True


@dataclass
class LineResult:
    base_price: Decimal
    quantity: Decimal
    discount_pct: Decimal
    discount_amount: Decimal
    price: Decimal       # displayed unit price
    subtotal: Decimal    # taxable value
    cgst: Decimal
    sgst: Decimal
    total: Decimal
    gst_applied: bool


@dataclass
class InvoiceTotals:
    company: CompanyProfile
    lines: list = field(default_factory=list)
    subtotal: Decimal = ZERO
    discount_total: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    extra_charges: Decimal = ZERO
    total: Decimal = ZERO
    advance_paid: Decimal = ZERO
    balance_due: Decimal = ZERO
    status: str = "UNPAID"
    total_in_words: str = ""


def price_line(
    line: LineInput,
    company: CompanyProfile,
    *,
    overall_discount=ZERO,
    gst_rate=None,
) -> LineResult:
    base = _dec(line.base_price)
    qty = _dec(line.quantity)
    if qty <= 0:
        raise PricingError("Quantity must be greater than 0")
    if base < 0:
        raise PricingError("Price cannot be negative")

    rate = _rate(gst_rate)
    pct = effective_discount(line.discount_pct, overall_discount)
    unit = base * (1 - pct / HUNDRED)
    discount_amount = money(base * pct / HUNDRED * qty)

    if not line.gst_applied:
        subtotal = money(unit * qty)
        return LineResult(
            base_price=money(base), quantity=qty, discount_pct=pct,
            discount_amount=discount_amount, price=money(unit),
            subtotal=subtotal, cgst=ZERO, sgst=ZERO, total=subtotal,
            gst_applied=False,
        )

    half = rate / 2 / HUNDRED
    if company.gst_inclusive:
        price = gst_inclusive_price(unit, rate)
        total = money(price * qty)
        tax = total / (1 + rate / HUNDRED) * (rate / HUNDRED)
        cgst = sgst = money(tax / 2)
        subtotal = total - cgst - sgst
    else:
        price = money(unit)
        subtotal = money(unit * qty)
        cgst = sgst = money(subtotal * half)
        total = subtotal + cgst + sgst

    return LineResult(
        base_price=money(base), quantity=qty, discount_pct=pct,
        discount_amount=discount_amount, price=price,
        subtotal=subtotal, cgst=cgst, sgst=sgst, total=total,
        gst_applied=True,
    )


def payment_status(total, advance_paid) -> str:
    advance = _dec(advance_paid)
    if advance <= 0:
        return "UNPAID"
    if advance >= _dec(total):
        return "PAID"
    return "ADVANCE"


def calculate_invoice(
    lines: Iterable[LineInput],
    company_type: str,
    *,
    overall_discount=ZERO,
    extra_charges=ZERO,
    advance_paid=ZERO,
    gst_rate=None,
) -> InvoiceTotals:
    company = get_company(company_type)
    extra = money(_dec(extra_charges))
    advance = money(_dec(advance_paid))
    if extra < 0:
        raise PricingError("Extra charges cannot be negative")
    if advance < 0:
        raise PricingError("Advance cannot be negative")

    priced = [
        price_line(l, company, overall_discount=overall_discount, gst_rate=gst_rate)
        for l in lines
    ]
    if not priced:
        raise PricingError("Invoice needs at least one item")

    out = InvoiceTotals(company=company, lines=priced, extra_charges=extra, advance_paid=advance)
    out.subtotal = sum((l.subtotal for l in priced), ZERO)
    out.discount_total = sum((l.discount_amount for l in priced), ZERO)
    out.cgst = sum((l.cgst for l in priced), ZERO)
    out.sgst = sum((l.sgst for l in priced), ZERO)
    out.total = sum((l.total for l in priced), ZERO) + extra
    # not clamped: an overpaid invoice shows a negative balance
    out.balance_due = out.total - advance
    out.status = payment_status(out.total, advance)
    out.total_in_words = amount_in_words(out.total)
    return out
