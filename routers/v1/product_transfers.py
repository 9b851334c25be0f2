# routers/v1/product_transfers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, selectinload

from database import get_db
from models import ProductTransfer
from schemas import ProductTransferCreate, ProductTransferOut, ProductTransferUpdate
from services import transfer_workflow

router = APIRouter(prefix="/product-transfers", tags=["product-transfers"])


@router.get("", response_model=List[ProductTransferOut])
def list_product_transfers(
    user_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    q = db.query(ProductTransfer).options(
        selectinload(ProductTransfer.product),
        selectinload(ProductTransfer.consumption),
    )
    if user_id:
        q = q.filter(ProductTransfer.user_id == user_id)
    if status:
        q = q.filter(ProductTransfer.status == status.upper())
    return q.order_by(ProductTransfer.created_at.desc(), ProductTransfer.id.desc()).all()


@router.post("", response_model=ProductTransferOut, status_code=201)
def create_product_transfer(payload: ProductTransferCreate, db: Session = Depends(get_db)):
    t = transfer_workflow.create_product_transfer(db, **payload.model_dump())
    db.commit(); db.refresh(t)
    return t


@router.get("/{transfer_id}", response_model=ProductTransferOut)
def get_product_transfer(transfer_id: int, db: Session = Depends(get_db)):
    t = db.get(ProductTransfer, transfer_id)
    if not t:
        raise HTTPException(404, "Product transfer not found")
    return t


@router.put("/{transfer_id}", response_model=ProductTransferOut)
def update_product_transfer(transfer_id: int, payload: ProductTransferUpdate, db: Session = Depends(get_db)):
    t = db.get(ProductTransfer, transfer_id, with_for_update=True)
    if not t:
        raise HTTPException(404, "Product transfer not found")
    transfer_workflow.update_product_transfer(db, t, **payload.model_dump())
    db.commit(); db.refresh(t)
    return t
