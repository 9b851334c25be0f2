# routers/v1/product_structures.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, selectinload

from database import get_db
from models import Product, ProductStructure, RawMaterial
from schemas import ProductStructureCreate, ProductStructureGroup, ProductStructureOut

router = APIRouter(prefix="/product-structures", tags=["product-structures"])


@router.get("", response_model=List[ProductStructureGroup])
def list_structures(db: Session = Depends(get_db)):
    """Bill of materials grouped per product."""
    products = (
        db.query(Product)
        .join(ProductStructure, ProductStructure.product_id == Product.id)
        .options(selectinload(Product.structure).selectinload(ProductStructure.raw_material))
        .distinct()
        .order_by(Product.name.asc())
        .all()
    )
    return [{"product": p, "items": p.structure} for p in products]


@router.post("", response_model=List[ProductStructureOut], status_code=201)
def create_structure(payload: ProductStructureCreate, db: Session = Depends(get_db)):
    product = db.get(Product, payload.product_id)
    if not product:
        raise HTTPException(404, "Product not found")

    ids = [it.raw_material_id for it in payload.items]
    if len(ids) != len(set(ids)):
        raise HTTPException(400, "Duplicate raw materials in request")

    materials = {rm.id: rm for rm in db.query(RawMaterial).filter(RawMaterial.id.in_(ids)).all()}
    missing = [i for i in ids if i not in materials]
    if missing:
        raise HTTPException(404, f"Raw materials not found: {', '.join(map(str, missing))}")

    existing = (
        db.query(ProductStructure)
        .filter(ProductStructure.product_id == product.id, ProductStructure.raw_material_id.in_(ids))
        .all()
    )
    if existing:
        names = ", ".join(materials[ps.raw_material_id].name for ps in existing)
        raise HTTPException(400, f"Some materials already exist in this product structure: {names}")

    rows = [
        ProductStructure(
            product_id=product.id,
            raw_material_id=it.raw_material_id,
            quantity_required=it.quantity_required,
        )
        for it in payload.items
    ]
    db.add_all(rows)
    db.commit()
    for r in rows:
        db.refresh(r)
    return rows


@router.delete("/{structure_id}")
def delete_structure(structure_id: int, db: Session = Depends(get_db)):
    ps = db.get(ProductStructure, structure_id)
    if not ps:
        raise HTTPException(404, "Product structure not found")
    db.delete(ps)
    db.commit()
    return {"message": "Product structure deleted"}
