# routers/v1/user_inventory.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session, selectinload

from database import get_db
from models import User, UserInventory
from schemas import UserInventoryAdjust, UserInventoryOut
from services import inventory

router = APIRouter(prefix="/user-inventory", tags=["user-inventory"])


@router.get("", response_model=List[UserInventoryOut])
def list_user_inventory(user_id: int = Query(..., description="Owner of the inventory"), db: Session = Depends(get_db)):
    return (
        db.query(UserInventory)
        .options(selectinload(UserInventory.raw_material))
        .filter(UserInventory.user_id == user_id)
        .order_by(UserInventory.id.asc())
        .all()
    )


@router.post("", response_model=UserInventoryOut)
def adjust_user_inventory(payload: UserInventoryAdjust, db: Session = Depends(get_db)):
    if not db.get(User, payload.user_id):
        raise HTTPException(404, "User not found")
    rm = inventory.get_raw_material(db, payload.raw_material_id)

    if payload.action == "ADD":
        row = inventory.add_to_user(db, payload.user_id, rm, payload.quantity)
    else:
        row = inventory.take_from_user(db, payload.user_id, rm, payload.quantity)
    db.commit(); db.refresh(row)
    return row
