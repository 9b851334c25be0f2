# routers/v1/categories.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from slugify import slugify
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models import Category, Product
from schemas import CategoryIn, CategoryOut

router = APIRouter(prefix="/categories", tags=["categories"])


def _name_and_slug(payload: CategoryIn) -> tuple[str, str]:
    name = payload.name.strip()
    slug = slugify(name)
    if not slug:
        raise HTTPException(400, "Category name must contain letters or digits")
    return name, slug


def _duplicate(db: Session, name: str, slug: str, exclude_id: Optional[int] = None):
    q = db.query(Category.id).filter(or_(Category.name == name, Category.slug == slug))
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    return q.first()


@router.get("", response_model=List[CategoryOut])
def list_categories(
    search: Optional[str] = Query(None, description="Search by name or slug (ilike)"),
    db: Session = Depends(get_db),
):
    q = db.query(Category)
    if search and search.strip():
        like = f"%{search.strip()}%"
        q = q.filter(or_(Category.name.ilike(like), Category.slug.ilike(like)))
    return q.order_by(Category.name.asc()).all()


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    c = db.get(Category, category_id)
    if not c:
        raise HTTPException(404, "Category not found")
    return c


@router.post("", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryIn, db: Session = Depends(get_db)):
    name, slug = _name_and_slug(payload)
    if _duplicate(db, name, slug):
        raise HTTPException(409, "Category already exists")
    c = Category(name=name, slug=slug)
    try:
        db.add(c); db.commit(); db.refresh(c)
    except IntegrityError:
        db.rollback()
        raise HTTPException(409, "Category already exists")
    return c


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, payload: CategoryIn, db: Session = Depends(get_db)):
    c = db.get(Category, category_id)
    if not c:
        raise HTTPException(404, "Category not found")
    name, slug = _name_and_slug(payload)
    if _duplicate(db, name, slug, exclude_id=c.id):
        raise HTTPException(409, "Another category with same name already exists")

    # products reference the category by name
    if name != c.name:
        db.query(Product).filter(Product.category == c.name).update(
            {Product.category: name}, synchronize_session=False
        )
    c.name = name
    c.slug = slug
    db.commit(); db.refresh(c)
    return c


@router.delete("/{category_id}")
def delete_category(category_id: int, db: Session = Depends(get_db)):
    c = db.get(Category, category_id)
    if not c:
        raise HTTPException(404, "Category not found")
    if db.query(Product.id).filter(Product.category == c.name).first():
        raise HTTPException(400, "Category is used by products and cannot be deleted")
    db.delete(c)
    db.commit()
    return {"message": "Category deleted"}
