# routers/v1/raw_material_transfers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, selectinload

from database import get_db
from models import RawMaterialTransfer
from schemas import RawMaterialTransferCreate, RawMaterialTransferOut, RawMaterialTransferUpdate
from services import transfer_workflow

router = APIRouter(prefix="/raw-material-transfers", tags=["raw-material-transfers"])


def _get(db: Session, transfer_id: int) -> RawMaterialTransfer:
    t = db.get(RawMaterialTransfer, transfer_id, with_for_update=True)
    if not t:
        raise HTTPException(404, "Transfer not found")
    return t


@router.get("", response_model=List[RawMaterialTransferOut])
def list_transfers(
    status: Optional[str] = Query(None),
    user_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
):
    q = db.query(RawMaterialTransfer).options(selectinload(RawMaterialTransfer.raw_material))
    if status:
        q = q.filter(RawMaterialTransfer.status == status.upper())
    if user_id:
        q = q.filter(RawMaterialTransfer.user_id == user_id)
    return q.order_by(RawMaterialTransfer.created_at.desc(), RawMaterialTransfer.id.desc()).all()


@router.post("", response_model=List[RawMaterialTransferOut], status_code=201)
def issue_transfers(payload: RawMaterialTransferCreate, db: Session = Depends(get_db)):
    transfers = transfer_workflow.issue_raw_materials(
        db,
        user_id=payload.user_id,
        items=[it.model_dump() for it in payload.items],
    )
    db.commit()
    for t in transfers:
        db.refresh(t)
    return transfers


@router.get("/{transfer_id}", response_model=RawMaterialTransferOut)
def get_transfer(transfer_id: int, db: Session = Depends(get_db)):
    t = db.get(RawMaterialTransfer, transfer_id)
    if not t:
        raise HTTPException(404, "Transfer not found")
    return t


@router.put("/{transfer_id}", response_model=RawMaterialTransferOut)
def update_transfer(transfer_id: int, payload: RawMaterialTransferUpdate, db: Session = Depends(get_db)):
    t = _get(db, transfer_id)
    transfer_workflow.update_raw_material_transfer(db, t, **payload.model_dump())
    db.commit(); db.refresh(t)
    return t


@router.delete("/{transfer_id}")
def delete_transfer(transfer_id: int, db: Session = Depends(get_db)):
    t = _get(db, transfer_id)
    transfer_workflow.delete_raw_material_transfer(db, t)
    db.commit()
    return {"message": "Transfer deleted"}
