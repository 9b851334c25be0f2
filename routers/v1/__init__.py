# routers/v1/__init__.py
from fastapi import APIRouter

from . import (
    users, customers, categories, products, invoices, analytics, payments, counters, credit_notes,
    vendors, vendor_bills, vendor_payments, vendor_credit_notes,
    raw_materials, product_structures, user_inventory,
    raw_material_transfers, product_transfers, manufacturing,
)

api_v1 = APIRouter()

# billing
api_v1.include_router(users.router)
api_v1.include_router(customers.router)
api_v1.include_router(categories.router)
api_v1.include_router(products.router)
api_v1.include_router(invoices.router)
api_v1.include_router(analytics.router)
api_v1.include_router(payments.router)
api_v1.include_router(credit_notes.router)

# counters: one router per document type
for r in counters.routers:
    api_v1.include_router(r)

# vendor ledger
api_v1.include_router(vendors.router)
api_v1.include_router(vendor_bills.router)
api_v1.include_router(vendor_payments.router)
api_v1.include_router(vendor_credit_notes.router)

# manufacturing
api_v1.include_router(raw_materials.router)
api_v1.include_router(product_structures.router)
api_v1.include_router(user_inventory.router)
api_v1.include_router(raw_material_transfers.router)
api_v1.include_router(product_transfers.router)
api_v1.include_router(manufacturing.router)

__all__ = ["api_v1"]
