# services/inventory.py
"""Stock movements: main raw-material store, per-user inventory, finished products.

Every helper only flushes; the caller owns the transaction.
"""
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from models import Product, RawMaterial, UserInventory
from services.errors import NotFound, StockError

logger = logging.getLogger(__name__)


def fmt_qty(q) -> str:
    return format(Decimal(q).normalize(), "f")


def get_raw_material(db: Session, raw_material_id: int, *, lock: bool = False) -> RawMaterial:
    rm = db.get(RawMaterial, raw_material_id, with_for_update=lock)
    if not rm:
        raise NotFound(f"Raw material {raw_material_id} not found")
    return rm


def get_product(db: Session, product_id: int, *, lock: bool = False) -> Product:
    p = db.get(Product, product_id, with_for_update=lock)
    if not p:
        raise NotFound("Product not found")
    return p


# ---------- main store ----------
def ensure_raw_material_stock(rm: RawMaterial, qty: Decimal) -> None:
    if Decimal(rm.quantity) < qty:
        raise StockError(
            f"Insufficient stock for {rm.name}. "
            f"Available: {fmt_qty(rm.quantity)}, Requested: {fmt_qty(qty)}"
        )


def take_raw_material(db: Session, rm: RawMaterial, qty: Decimal) -> None:
    ensure_raw_material_stock(rm, qty)
    rm.quantity = Decimal(rm.quantity) - qty
    db.flush()
    logger.info("Main stock -%s %s (%s left)", fmt_qty(qty), rm.name, fmt_qty(rm.quantity))


def put_raw_material(db: Session, rm: RawMaterial, qty: Decimal) -> None:
    rm.quantity = Decimal(rm.quantity) + qty
    db.flush()
    logger.info("Main stock +%s %s (%s now)", fmt_qty(qty), rm.name, fmt_qty(rm.quantity))


# ---------- user inventory ----------
def user_holding(db: Session, user_id: int, raw_material_id: int) -> UserInventory | None:
    return (
        db.query(UserInventory)
        .filter(UserInventory.user_id == user_id, UserInventory.raw_material_id == raw_material_id)
        .with_for_update()
        .first()
    )


def add_to_user(db: Session, user_id: int, rm: RawMaterial, qty: Decimal) -> UserInventory:
    """Upsert (user, material) and add qty."""
    row = user_holding(db, user_id, rm.id)
    if row is None:
        row = UserInventory(user_id=user_id, raw_material_id=rm.id, quantity=qty, unit=rm.unit)
        db.add(row)
    else:
        row.quantity = Decimal(row.quantity) + qty
    db.flush()
    logger.info("User %s inventory +%s %s", user_id, fmt_qty(qty), rm.name)
    return row


def take_from_user(
    db: Session,
    user_id: int,
    rm: RawMaterial,
    qty: Decimal,
    *,
    drop_empty: bool = False,
) -> UserInventory | None:
    """Subtract qty from the user's holding; drop the row at zero when asked."""
    row = user_holding(db, user_id, rm.id)
    if row is None:
        raise StockError(f"User has no inventory of {rm.name}")
    held = Decimal(row.quantity)
    if held < qty:
        raise StockError(
            f"Insufficient user inventory for {rm.name}. "
            f"Available: {fmt_qty(held)}, Required: {fmt_qty(qty)}"
        )
    remaining = held - qty
    if remaining == 0 and drop_empty:
        db.delete(row)
        row = None
    else:
        row.quantity = remaining
    db.flush()
    logger.info("User %s inventory -%s %s", user_id, fmt_qty(qty), rm.name)
    return row


# ---------- finished products ----------
def take_product(db: Session, product: Product, qty: Decimal) -> None:
    if Decimal(product.quantity) < qty:
        raise StockError(
            f"Insufficient quantity for {product.name}. "
            f"Available: {fmt_qty(product.quantity)}, Requested: {fmt_qty(qty)}"
        )
    product.quantity = Decimal(product.quantity) - qty
    db.flush()
    logger.info("Product stock -%s %s", fmt_qty(qty), product.name)


def put_product(db: Session, product: Product, qty: Decimal) -> None:
    product.quantity = Decimal(product.quantity) + qty
    db.flush()
    logger.info("Product stock +%s %s", fmt_qty(qty), product.name)
