# routers/v1/raw_materials.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from models import ProductStructure, RawMaterial, RawMaterialTransfer
from schemas import RawMaterialCreate, RawMaterialOut, RawMaterialStockOut, RawMaterialUpdate
from services.transfer_workflow import stock_summary

router = APIRouter(prefix="/raw-materials", tags=["raw-materials"])


@router.get("", response_model=List[RawMaterialOut])
def list_raw_materials(
    q: Optional[str] = Query(None, description="Search by name (ilike)"),
    db: Session = Depends(get_db),
):
    qry = db.query(RawMaterial)
    if q and q.strip():
        qry = qry.filter(RawMaterial.name.ilike(f"%{q.strip()}%"))
    return qry.order_by(RawMaterial.name.asc()).all()


@router.get("/stock", response_model=List[RawMaterialStockOut])
def raw_material_stock(db: Session = Depends(get_db)):
    return stock_summary(db)


@router.post("", response_model=RawMaterialOut, status_code=201)
def create_raw_material(payload: RawMaterialCreate, db: Session = Depends(get_db)):
    rm = RawMaterial(
        name=payload.name.strip(),
        quantity=payload.quantity,
        unit=(payload.unit or "").strip() or "pcs",
    )
    db.add(rm); db.commit(); db.refresh(rm)
    return rm


@router.get("/{raw_material_id}", response_model=RawMaterialOut)
def get_raw_material(raw_material_id: int, db: Session = Depends(get_db)):
    rm = db.get(RawMaterial, raw_material_id)
    if not rm:
        raise HTTPException(404, "Raw material not found")
    return rm


@router.put("/{raw_material_id}", response_model=RawMaterialOut)
def update_raw_material(raw_material_id: int, payload: RawMaterialUpdate, db: Session = Depends(get_db)):
    rm = db.get(RawMaterial, raw_material_id)
    if not rm:
        raise HTTPException(404, "Raw material not found")
    for k, v in payload.model_dump(exclude_unset=True).items():
        if k == "name" and not (v or "").strip():
            raise HTTPException(400, "Name is required")
        if k == "unit":
            v = (v or "").strip() or "pcs"
        setattr(rm, k, v)
    db.commit(); db.refresh(rm)
    return rm


@router.delete("/{raw_material_id}")
def delete_raw_material(raw_material_id: int, db: Session = Depends(get_db)):
    rm = db.get(RawMaterial, raw_material_id)
    if not rm:
        raise HTTPException(404, "Raw material not found")
    in_use = (
        db.query(ProductStructure.id).filter(ProductStructure.raw_material_id == rm.id).first()
        or db.query(RawMaterialTransfer.id).filter(RawMaterialTransfer.raw_material_id == rm.id).first()
    )
    if in_use:
        raise HTTPException(400, "Raw material in use (structures or transfers); cannot delete")
    db.delete(rm)
    db.commit()
    return {"message": "Raw material deleted"}
