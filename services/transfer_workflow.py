# services/transfer_workflow.py
"""
Custody workflow between the super-admin store and production users.

Raw-material transfer (store -> user):

    SENT      -> USED | RETURNED | CANCELLED
    RETURNED  -> REPAIRING | UNUSED
    REPAIRING -> FINISHED | UNUSED

CANCELLED puts the issued qty back in the store. RETURNED holds the rejected
qty aside: FINISHED puts it back, UNUSED writes it off.

Product transfer (user -> store): SENT -> RECEIVED | REJECTED | CANCELLED.

Each function mutates status and stock in the caller's session and flushes;
the router commits once, so a failed check leaves nothing half-written.
"""
import logging
from collections import defaultdict
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from models import (
    ProductStructure,
    ProductTransfer,
    RawMaterial,
    RawMaterialConsumption,
    RawMaterialTransfer,
    User,
)
from services import inventory
from services.errors import DomainError, NotFound, StockError, TransitionError

logger = logging.getLogger(__name__)

RAW_TRANSITIONS = {
    "SENT": {"USED", "RETURNED", "CANCELLED"},
    "RETURNED": {"REPAIRING", "UNUSED"},
    "REPAIRING": {"FINISHED", "UNUSED"},
}
RAW_STATUSES = {"SENT", "USED", "RETURNED", "REPAIRING", "FINISHED", "UNUSED", "CANCELLED"}

PRODUCT_TRANSITIONS = {"SENT": {"RECEIVED", "REJECTED", "CANCELLED"}}
PRODUCT_STATUSES = {"SENT", "RECEIVED", "REJECTED", "CANCELLED"}

DEFAULT_UNUSED_REASON = "Product is too damaged"


def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def _check_transition(table: dict, statuses: set, current: str, target: str) -> None:
    if target not in statuses:
        raise DomainError(f"Invalid status: {target}")
    if target not in table.get(current, set()):
        raise TransitionError(f"Cannot change status from {current} to {target}")


# =========================================
# ========= Raw-material transfers ========
# =========================================

def issue_raw_materials(db: Session, *, user_id: int, items: list[dict]) -> list[RawMaterialTransfer]:
    """
    Issue items [{raw_material_id, quantity_issued, notes?}] to a user.
    All stock is checked before anything is written.
    """
    _get_user(db, user_id)
    if not items:
        raise DomainError("At least one item is required")

    requested: dict[int, Decimal] = defaultdict(Decimal)
    for it in items:
        qty = Decimal(it["quantity_issued"])
        if qty <= 0:
            raise DomainError("Quantity issued must be greater than 0")
        requested[it["raw_material_id"]] += qty

    materials = {
        rm_id: inventory.get_raw_material(db, rm_id, lock=True) for rm_id in sorted(requested)
    }
    for rm_id, qty in requested.items():
        inventory.ensure_raw_material_stock(materials[rm_id], qty)

    transfers = []
    for it in items:
        rm = materials[it["raw_material_id"]]
        qty = Decimal(it["quantity_issued"])
        inventory.take_raw_material(db, rm, qty)
        t = RawMaterialTransfer(
            user_id=user_id,
            raw_material_id=rm.id,
            quantity_issued=qty,
            quantity_approved=0,
            quantity_rejected=0,
            status="SENT",
            rejection_images=[],
            notes=it.get("notes"),
        )
        db.add(t)
        transfers.append(t)
    db.flush()
    logger.info("Issued %d raw-material transfer(s) to user %s", len(transfers), user_id)
    return transfers


def update_raw_material_transfer(
    db: Session,
    transfer: RawMaterialTransfer,
    *,
    status: str,
    return_quantity: Decimal | None = None,
    rejection_reason: str | None = None,
    rejection_images: list[str] | None = None,
    notes: str | None = None,
) -> RawMaterialTransfer:
    current = transfer.status
    _check_transition(RAW_TRANSITIONS, RAW_STATUSES, current, status)

    rm = inventory.get_raw_material(db, transfer.raw_material_id, lock=True)
    issued = Decimal(transfer.quantity_issued)

    if status == "USED":
        transfer.quantity_approved = issued
        transfer.quantity_rejected = 0
        inventory.add_to_user(db, transfer.user_id, rm, issued)

    elif status == "RETURNED":
        qty = issued if return_quantity is None else Decimal(return_quantity)
        if qty <= 0:
            raise DomainError("Return quantity must be greater than 0")
        if qty > issued:
            raise DomainError("Return quantity cannot exceed issued quantity")
        approved = issued - qty
        transfer.quantity_rejected = qty
        transfer.quantity_approved = approved
        transfer.rejection_type = "FULL" if approved == 0 else "PARTIAL"
        transfer.rejection_reason = rejection_reason
        transfer.rejection_images = list(rejection_images or [])
        if approved > 0:
            inventory.add_to_user(db, transfer.user_id, rm, approved)

    elif status == "FINISHED":
        # repaired goods go back to the store
        inventory.put_raw_material(db, rm, Decimal(transfer.quantity_rejected))

    elif status == "UNUSED":
        transfer.rejection_reason = rejection_reason or transfer.rejection_reason or DEFAULT_UNUSED_REASON

    elif status == "CANCELLED":
        inventory.put_raw_material(db, rm, issued)
        transfer.quantity_approved = 0
        transfer.quantity_rejected = 0

    # REPAIRING: status only
    if notes is not None:
        transfer.notes = notes
    transfer.status = status
    db.flush()
    logger.info("Raw-material transfer %s: %s -> %s", transfer.id, current, status)
    return transfer


def delete_raw_material_transfer(db: Session, transfer: RawMaterialTransfer) -> None:
    """Remove a transfer and reverse whatever stock it still holds."""
    if transfer.consumed_in_manufacturing:
        raise TransitionError("Transfer was consumed by manufacturing and cannot be deleted")

    rm = inventory.get_raw_material(db, transfer.raw_material_id, lock=True)
    issued = Decimal(transfer.quantity_issued)
    approved = Decimal(transfer.quantity_approved or 0)
    rejected = Decimal(transfer.quantity_rejected or 0)

    if transfer.status == "SENT":
        inventory.put_raw_material(db, rm, issued)
    elif transfer.status == "USED":
        inventory.take_from_user(db, transfer.user_id, rm, issued, drop_empty=True)
        inventory.put_raw_material(db, rm, issued)
    elif transfer.status in ("RETURNED", "REPAIRING"):
        if approved > 0:
            inventory.take_from_user(db, transfer.user_id, rm, approved, drop_empty=True)
        inventory.put_raw_material(db, rm, approved + rejected)
    # FINISHED / UNUSED / CANCELLED: nothing held anymore

    logger.info("Deleted raw-material transfer %s (%s)", transfer.id, transfer.status)
    db.delete(transfer)
    db.flush()


def stock_summary(db: Session) -> list[dict]:
    """Per material: in store, out with users (SENT), used, still with users."""
    sent = defaultdict(Decimal)
    used = defaultdict(Decimal)
    for rm_id, status, qty in db.query(
        RawMaterialTransfer.raw_material_id,
        RawMaterialTransfer.status,
        RawMaterialTransfer.quantity_issued,
    ).filter(RawMaterialTransfer.status.in_(("SENT", "USED"))):
        (sent if status == "SENT" else used)[rm_id] += Decimal(qty)

    rows = []
    for rm in db.query(RawMaterial).order_by(RawMaterial.name.asc()).all():
        rows.append({
            "id": rm.id,
            "name": rm.name,
            "unit": rm.unit,
            "available": Decimal(rm.quantity),
            "sent_to_users": sent[rm.id],
            "used": used[rm.id],
            "remaining_with_users": sent[rm.id] - used[rm.id],
        })
    return rows


# =========================================
# =========== Product transfers ===========
# =========================================

def _structure(db: Session, product_id: int) -> list[ProductStructure]:
    lines = db.query(ProductStructure).filter(ProductStructure.product_id == product_id).all()
    if not lines:
        raise DomainError("Product structure not defined")
    return lines


def create_product_transfer(
    db: Session,
    *,
    user_id: int,
    product_id: int,
    quantity_sent: Decimal,
    notes: str | None = None,
) -> ProductTransfer:
    """User hands finished goods over; the BOM quantities leave the user's inventory."""
    _get_user(db, user_id)
    product = inventory.get_product(db, product_id)
    qty = Decimal(quantity_sent)
    if qty <= 0:
        raise DomainError("Quantity sent must be greater than 0")

    lines = _structure(db, product.id)
    needs = [(ps.raw_material, Decimal(ps.quantity_required) * qty) for ps in lines]

    # verify everything first, then deduct
    for rm, required in needs:
        row = inventory.user_holding(db, user_id, rm.id)
        held = Decimal(row.quantity) if row else Decimal(0)
        if held < required:
            raise StockError(
                f"Insufficient user inventory for {rm.name}. "
                f"Available: {inventory.fmt_qty(held)}, Required: {inventory.fmt_qty(required)}"
            )

    transfer = ProductTransfer(
        user_id=user_id,
        product_id=product.id,
        quantity_sent=qty,
        status="SENT",
        notes=notes,
    )
    db.add(transfer)
    db.flush()

    for rm, required in needs:
        inventory.take_from_user(db, user_id, rm, required)
        db.add(RawMaterialConsumption(
            user_id=user_id,
            product_id=product.id,
            raw_material_id=rm.id,
            product_transfer_id=transfer.id,
            quantity_used=required,
            unit=rm.unit,
            product_transfer_quantity=qty,
            notes=f"Used for {inventory.fmt_qty(qty)} x {product.name}",
        ))
    db.flush()
    logger.info("Product transfer %s: user %s sent %s x %s", transfer.id, user_id, inventory.fmt_qty(qty), product.name)
    return transfer


def update_product_transfer(
    db: Session,
    transfer: ProductTransfer,
    *,
    status: str,
    received_by: int | None = None,
    notes: str | None = None,
) -> ProductTransfer:
    current = transfer.status
    _check_transition(PRODUCT_TRANSITIONS, PRODUCT_STATUSES, current, status)

    if status == "RECEIVED":
        if received_by is not None:
            _get_user(db, received_by)
        product = inventory.get_product(db, transfer.product_id, lock=True)
        inventory.put_product(db, product, Decimal(transfer.quantity_sent))
        transfer.received_by = received_by
        transfer.received_at = datetime.now(timezone.utc)
    else:
        # REJECTED / CANCELLED: consumed materials go back to the user
        for c in transfer.consumption:
            inventory.add_to_user(db, transfer.user_id, c.raw_material, Decimal(c.quantity_used))

    if notes is not None:
        transfer.notes = notes
    transfer.status = status
    db.flush()
    logger.info("Product transfer %s: %s -> %s", transfer.id, current, status)
    return transfer


# =========================================
# ============ Manufacturing ==============
# =========================================

def complete_manufacturing(
    db: Session,
    *,
    user_id: int,
    product_id: int,
    quantity_produced: Decimal,
    transfer_ids: list[int] | None = None,
):
    """
    Book finished goods made by a user.

    With transfer_ids: those SENT transfers must cover the bill of materials.
    Their issued qty is booked to the user, the BOM is drawn from the user's
    inventory and any surplus stays there. The transfers end USED and flagged
    consumed_in_manufacturing. Without transfer_ids the BOM comes straight out
    of the user's inventory.
    """
    _get_user(db, user_id)
    product = inventory.get_product(db, product_id, lock=True)
    qty = Decimal(quantity_produced)
    if qty <= 0:
        raise DomainError("Quantity produced must be greater than 0")

    required = {ps.raw_material_id: (ps.raw_material, Decimal(ps.quantity_required) * qty)
                for ps in _structure(db, product.id)}

    consumed = []
    if transfer_ids:
        transfers = (
            db.query(RawMaterialTransfer)
            .filter(RawMaterialTransfer.id.in_(transfer_ids), RawMaterialTransfer.user_id == user_id)
            .all()
        )
        if len(transfers) != len(set(transfer_ids)):
            raise NotFound("Some transfers were not found for this user")
        covered = defaultdict(Decimal)
        for t in transfers:
            if t.status != "SENT":
                raise TransitionError(f"Transfer {t.id} is {t.status}, expected SENT")
            covered[t.raw_material_id] += Decimal(t.quantity_issued)
        for rm_id, (rm, need) in required.items():
            if covered[rm_id] < need:
                raise StockError(
                    f"Transfers do not cover {rm.name}. "
                    f"Issued: {inventory.fmt_qty(covered[rm_id])}, Required: {inventory.fmt_qty(need)}"
                )
        for t in transfers:
            inventory.add_to_user(db, user_id, t.raw_material, Decimal(t.quantity_issued))
            t.status = "USED"
            t.quantity_approved = t.quantity_issued
            t.quantity_rejected = 0
            t.consumed_in_manufacturing = True
            consumed.append(t.id)

    for rm, need in required.values():
        inventory.take_from_user(db, user_id, rm, need)

    inventory.put_product(db, product, qty)
    db.flush()
    logger.info("Manufacturing complete: user %s made %s x %s", user_id, inventory.fmt_qty(qty), product.name)
    return {
        "message": "Manufacturing completed successfully",
        "product_id": product.id,
        "quantity_produced": qty,
        "product_quantity": Decimal(product.quantity),
        "transfers_used": consumed,
    }
