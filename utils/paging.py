# utils/paging.py
from sqlalchemy.orm import Query


def paginate(base_q: Query, page: int = 1, per_page: int | None = 20, all: bool = False) -> dict:
    """Offset page dict: {items, total, page, per_page, pages}."""
    if all:
        items = base_q.all()
        total = len(items)
        return {"items": items, "total": total, "page": 1, "per_page": total, "pages": 1}

    total = base_q.count()
    limit = per_page or 20
    offset = (page - 1) * limit
    items = base_q.offset(offset).limit(limit).all()
    pages = (total + limit - 1) // limit
    return {
        "items": items,
        "total": total,
        "page": page,
        "per_page": limit,
        "pages": max(pages, 1),
    }
