# services/invoice_share.py
"""WhatsApp share link for an invoice: a wa.me URL carrying a short summary."""
import base64
import logging
import time
from decimal import Decimal, ROUND_HALF_UP
from urllib.parse import quote

from config import settings
from models import Invoice
from services.errors import DomainError

logger = logging.getLogger(__name__)


def format_inr(amount) -> str:
    """Rs. with Indian digit grouping: 105210 -> 'Rs. 1,05,210.00'."""
    q = Decimal(amount or 0).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if q < 0 else ""
    whole, frac = f"{abs(q):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}Rs. {whole}.{frac}"


def whatsapp_phone(number: str | None) -> str:
    digits = "".join(ch for ch in (number or "") if ch.isdigit())
    if not digits:
        raise DomainError("Customer phone number not found")
    code = settings.WHATSAPP_COUNTRY_CODE
    return digits if digits.startswith(code) else f"{code}{digits}"


def invoice_url(invoice: Invoice) -> str:
    token = base64.urlsafe_b64encode(
        f"{invoice.id}:{invoice.customer.number}:{int(time.time() * 1000)}".encode()
    ).decode()
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/invoices/{invoice.id}?token={token}"


def build_message(invoice: Invoice, link: str) -> str:
    total = invoice.total if invoice.total else invoice.subtotal
    due = invoice.due_date.strftime("%d %b %Y") if invoice.due_date else "On receipt"
    return (
        "*INVOICE NOTIFICATION*\n\n"
        f"Dear {invoice.customer.name},\n\n"
        "Your invoice has been generated.\n\n"
        f"*Invoice #:* {invoice.invoice_number}\n"
        f"*Total Amount:* {format_inr(total)}\n"
        f"*Due Date:* {due}\n\n"
        f"*View & Download Invoice:*\n{link}\n\n"
        "Thank you for your business!"
    )


def whatsapp_share(invoice: Invoice) -> dict:
    phone = whatsapp_phone(invoice.customer.number)
    link = invoice_url(invoice)
    message = build_message(invoice, link)
    logger.info("WhatsApp link for invoice %s -> %s", invoice.invoice_number, phone)
    return {
        "whatsapp_url": f"https://wa.me/{phone}?text={quote(message, safe='')}",
        "invoice_url": link,
        "sent_to": phone,
        "customer_name": invoice.customer.name,
        "invoice_number": invoice.invoice_number,
        "message": message,
    }
