# routers/v1/analytics.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from services.analytics import invoice_analytics

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/invoices")
def get_invoice_analytics(
    time_filter: Literal["current_year", "current_quarter", "last_year", "all_time"] = "current_year",
    category: Optional[str] = Query(None),
    customer_limit: Optional[int] = Query(10, ge=1, description="Omit with customer_search to list all matches"),
    customer_search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return invoice_analytics(
        db,
        time_filter=time_filter,
        category=category,
        customer_limit=customer_limit,
        customer_search=customer_search,
    )
