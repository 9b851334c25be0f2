# routers/v1/products.py
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from database import get_db
from models import InvoiceItem, Product, ProductStructure
from schemas import (
    ProductCreate,
    ProductOut,
    ProductPage,
    ProductQuantityDeduct,
    ProductRequirementOut,
    ProductUpdate,
)
from services import inventory
from utils.paging import paginate

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductPage)
def list_products(
    q: Optional[str] = Query(None, description="Search by name, category or size (ilike)"),
    category: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(20, ge=1, le=1000),
    all: bool = Query(False),
    db: Session = Depends(get_db),
):
    base_q = db.query(Product)
    if q and q.strip():
        like = f"%{q.strip()}%"
        base_q = base_q.filter(or_(Product.name.ilike(like), Product.category.ilike(like), Product.size.ilike(like)))
    if category:
        base_q = base_q.filter(Product.category == category)
    return paginate(base_q.order_by(Product.name.asc(), Product.id.asc()), page, per_page, all)


@router.post("", response_model=ProductOut, status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)):
    data = payload.model_dump()
    data["name"] = payload.name.strip()
    p = Product(**data)
    db.add(p); db.commit(); db.refresh(p)
    return p


@router.post("/update-quantity", response_model=ProductOut)
def deduct_product_quantity(payload: ProductQuantityDeduct, db: Session = Depends(get_db)):
    p = inventory.get_product(db, payload.product_id, lock=True)
    if Decimal(p.quantity) < payload.quantity_to_deduct:
        raise HTTPException(400, "Insufficient quantity")
    inventory.take_product(db, p, payload.quantity_to_deduct)
    db.commit(); db.refresh(p)
    return p


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    p = db.get(Product, product_id)
    if not p:
        raise HTTPException(404, "Product not found")
    return p


@router.get("/{product_id}/structure", response_model=ProductRequirementOut)
def product_requirements(
    product_id: int,
    quantity: Decimal = Query(Decimal("1"), gt=0),
    db: Session = Depends(get_db),
):
    """Raw materials needed to build `quantity` units."""
    p = db.get(Product, product_id)
    if not p:
        raise HTTPException(404, "Product not found")
    lines = db.query(ProductStructure).filter(ProductStructure.product_id == p.id).all()
    return {
        "product": p,
        "quantity": quantity,
        "required_materials": [
            {
                "raw_material_id": ps.raw_material_id,
                "name": ps.raw_material.name,
                "unit": ps.raw_material.unit,
                "quantity_per_unit": ps.quantity_required,
                "quantity_required": Decimal(ps.quantity_required) * quantity,
                "available": ps.raw_material.quantity,
            }
            for ps in lines
        ],
    }


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    p = db.get(Product, product_id)
    if not p:
        raise HTTPException(404, "Product not found")
    for k, v in payload.model_dump(exclude_unset=True).items():
        setattr(p, k, v)
    db.commit(); db.refresh(p)
    return p


@router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    p = db.get(Product, product_id)
    if not p:
        raise HTTPException(404, "Product not found")
    if db.query(InvoiceItem.id).filter(InvoiceItem.product_id == p.id).first():
        raise HTTPException(400, "Product is used on invoices; cannot delete")
    db.delete(p)
    db.commit()
    return {"message": "Product deleted"}
