# routers/v1/users.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models import User
from schemas import UserCreate, UserOut, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserOut])
def list_users(
    role: Optional[str] = Query(None),
    active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    q = db.query(User)
    if role:
        q = q.filter(User.role == role.upper())
    if active is not None:
        q = q.filter(User.is_active == active)
    return q.order_by(User.name.asc()).all()


@router.post("", response_model=UserOut, status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(409, "Email already exists")
    u = User(name=payload.name.strip(), email=email, role=payload.role, is_active=payload.is_active)
    try:
        db.add(u); db.commit(); db.refresh(u)
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "Email already exists")
    return u


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    u = db.get(User, user_id)
    if not u:
        raise HTTPException(404, "User not found")
    return u


@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db)):
    u = db.get(User, user_id)
    if not u:
        raise HTTPException(404, "User not found")
    for k, v in payload.model_dump(exclude_unset=True).items():
        if k == "email" and v:
            v = v.strip().lower()
        setattr(u, k, v)
    try:
        db.commit(); db.refresh(u)
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "Duplicate or invalid data")
    return u


@router.delete("/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db)):
    u = db.get(User, user_id)
    if not u:
        raise HTTPException(404, "User not found")
    # users with transfer history are deactivated, not removed
    try:
        db.delete(u)
        db.commit()
    except IntegrityError:
        db.rollback()
        u.is_active = False
        db.commit()
        return {"message": "User has transfer history; deactivated instead"}
    return {"message": "User deleted"}
