# routers/v1/customers.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models import Customer
from schemas import CustomerCreate, CustomerOut, CustomerPage, CustomerUpdate
from utils.paging import paginate

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=CustomerPage)
def list_customers(
    q: Optional[str] = Query(None, description="Search by name, number or city (ilike)"),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(20, ge=1, le=1000),
    all: bool = Query(False, description="Return all rows (ignore page/per_page)"),
    db: Session = Depends(get_db),
):
    base_q = db.query(Customer)
    if q and q.strip():
        like = f"%{q.strip()}%"
        base_q = base_q.filter(or_(
            Customer.name.ilike(like),
            Customer.number.ilike(like),
            Customer.city.ilike(like),
        ))
    return paginate(base_q.order_by(Customer.id.desc()), page, per_page, all)


@router.get("/check-name")
def check_customer_name(name: str, db: Session = Depends(get_db)):
    """Case-insensitive exact-name lookup used before creating a customer."""
    c = db.query(Customer).filter(func.lower(Customer.name) == name.strip().lower()).first()
    return {"exists": c is not None, "customer": CustomerOut.model_validate(c) if c else None}


@router.post("", response_model=CustomerOut, status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    number = payload.number.strip()
    if db.query(Customer).filter(Customer.number == number).first():
        raise HTTPException(409, "Customer with this number already exists")
    data = payload.model_dump()
    data["number"] = number
    data["name"] = payload.name.strip()
    c = Customer(**data)
    try:
        db.add(c); db.commit(); db.refresh(c)
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "Customer with this number already exists")
    return c


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    c = db.get(Customer, customer_id)
    if not c:
        raise HTTPException(404, "Customer not found")
    return c


@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)):
    c = db.get(Customer, customer_id)
    if not c:
        raise HTTPException(404, "Customer not found")
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(c, k, v.strip() if isinstance(v, str) else v)
    try:
        db.commit(); db.refresh(c)
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "Duplicate or invalid data")
    return c


@router.delete("/{customer_id}")
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    c = db.get(Customer, customer_id)
    if not c:
        raise HTTPException(404, "Customer not found")
    if c.invoices:
        raise HTTPException(400, "Customer has invoices; cannot delete")
    db.delete(c)
    db.commit()
    return {"message": "Customer deleted"}
