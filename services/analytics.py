# services/analytics.py
"""Invoice dashboard figures (revenue, quarters, top products and customers)."""
from collections import defaultdict
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session, selectinload

from models import Invoice, InvoiceItem, Product

TIME_FILTERS = ("current_year", "current_quarter", "last_year", "all_time")
ZERO = Decimal("0")


def date_range(time_filter: str, today: date | None = None) -> tuple[date | None, date]:
    today = today or date.today()
    if time_filter == "current_quarter":
        q = (today.month - 1) // 3
        start = date(today.year, q * 3 + 1, 1)
        end = date(today.year + 1, 1, 1) if q == 3 else date(today.year, q * 3 + 4, 1)
        return start, date.fromordinal(end.toordinal() - 1)
    if time_filter == "last_year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
    if time_filter == "all_time":
        return None, today
    return date(today.year, 1, 1), date(today.year, 12, 31)


def _quarter(d: date) -> int:
    return (d.month - 1) // 3


def invoice_analytics(
    db: Session,
    *,
    time_filter: str = "current_year",
    category: str | None = None,
    customer_limit: int | None = 10,
    customer_search: str | None = None,
    today: date | None = None,
) -> dict:
    today = today or date.today()
    start, end = date_range(time_filter, today)

    q = db.query(Invoice).options(
        selectinload(Invoice.items).selectinload(InvoiceItem.product),
        selectinload(Invoice.customer),
    ).filter(Invoice.invoice_date <= end)
    if start is not None:
        q = q.filter(Invoice.invoice_date >= start)
    if category and category != "all":
        q = q.filter(Invoice.items.any(InvoiceItem.product.has(Product.category == category)))
    invoices = q.order_by(Invoice.invoice_date.desc()).all()

    total_revenue = sum((Decimal(i.total) for i in invoices), ZERO)
    outstanding = sum((Decimal(i.balance_due) for i in invoices if i.status != "PAID"), ZERO)
    by_status = defaultdict(int)
    for i in invoices:
        by_status[i.status] += 1

    year = end.year
    quarters = []
    for idx in range(4):
        in_q = [i for i in invoices if i.invoice_date.year == year and _quarter(i.invoice_date) == idx]
        overdue = sum(
            1 for i in in_q
            if i.status in ("UNPAID", "ADVANCE") and i.due_date and i.due_date < today
        )
        open_count = sum(1 for i in in_q if i.status in ("UNPAID", "ADVANCE"))
        quarters.append({
            "quarter": f"Q{idx + 1} {year}",
            "revenue": sum((Decimal(i.total) for i in in_q), ZERO),
            "invoices": len(in_q),
            "paid": sum(1 for i in in_q if i.status == "PAID"),
            "pending": open_count - overdue,
            "overdue": overdue,
        })

    products = {}
    for inv in invoices:
        for item in inv.items:
            if category and category != "all" and (not item.product or item.product.category != category):
                continue
            name = item.product.name if item.product else item.name
            row = products.setdefault(name, {
                "product": name,
                "category": (item.product.category if item.product else None) or "Uncategorized",
                "quantity": ZERO,
                "revenue": ZERO,
            })
            row["quantity"] += Decimal(item.quantity)
            row["revenue"] += Decimal(item.total)
    top_products = sorted(products.values(), key=lambda r: r["revenue"], reverse=True)[:10]

    customers = {}
    for inv in invoices:
        c = inv.customer
        if customer_search and customer_search.lower() not in c.name.lower():
            continue
        row = customers.setdefault(c.id, {"customer": c.name, "total_spent": ZERO, "invoice_count": 0})
        row["total_spent"] += Decimal(inv.total)
        row["invoice_count"] += 1
    top_customers = sorted(
        (r for r in customers.values() if r["total_spent"] > 0),
        key=lambda r: r["total_spent"],
        reverse=True,
    )
    # a search shows every match
    if customer_limit and not customer_search:
        top_customers = top_customers[:customer_limit]

    yearly = defaultdict(lambda: {"revenue": ZERO, "invoice_count": 0})
    for inv in invoices:
        y = yearly[inv.invoice_date.year]
        y["revenue"] += Decimal(inv.total)
        y["invoice_count"] += 1
    annual = []
    prev = None
    for y in sorted(yearly):
        rev = yearly[y]["revenue"]
        growth = ((rev - prev) / prev * 100).quantize(Decimal("0.01")) if prev else ZERO
        annual.append({"year": y, "revenue": rev, "invoice_count": yearly[y]["invoice_count"], "growth": growth})
        prev = rev

    return {
        "time_filter": time_filter,
        "start_date": start,
        "end_date": end,
        "summary": {
            "total_revenue": total_revenue,
            "total_invoices": len(invoices),
            "average_invoice": (total_revenue / len(invoices)).quantize(Decimal("0.01")) if invoices else ZERO,
            "outstanding": outstanding,
            "by_status": dict(by_status),
        },
        "quarterly": quarters,
        "top_products": top_products,
        "top_customers": top_customers,
        "annual": annual,
    }
