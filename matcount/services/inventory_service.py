from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from matcount.core.config import settings
from matcount.core.errors import InsufficientStock, NotFound, ValidationError
from matcount.core.id_utils import generate_shortuuid
from matcount.core.observability import log_event
from matcount.models.inventory import InventoryLedger, StockHistory
from matcount.models.material import Material

DIRECTIONS = ("in", "out")


class PricingUpdate(Protocol):
    material_id: str
    unit_price: float | None
    gst_percent: float | None
    quantity: int | None


@dataclass(frozen=True)
class StockChange:
    material: Material
    previous_stock: int
    new_stock: int
    ledger_entry: InventoryLedger | None


def get_material_stock(db: Session, material_id: str) -> int:
    q = select(func.coalesce(func.sum(InventoryLedger.qty_delta), 0)).where(
        InventoryLedger.material_id == material_id,
    )
    return int(db.execute(q).scalar_one())


def get_material_or_404(db: Session, material_id: str, *, for_update: bool = False) -> Material:
    stmt = select(Material).where(Material.id == material_id)
    if for_update:
        stmt = stmt.with_for_update()
    material = db.execute(stmt).scalar_one_or_none()
    if not material:
        raise NotFound("Material not found.")
    return material


def add_ledger_entry(
    db: Session,
    *,
    material_id: str,
    material_name: str,
    qty_delta: int,
    reason: str,
    reference_id: str | None = None,
    note: str | None = None,
) -> InventoryLedger:
    entry = InventoryLedger(
        id=generate_shortuuid(),
        material_id=material_id,
        material_name=material_name,
        qty_delta=qty_delta,
        reason=reason,
        reference_id=reference_id,
        note=note,
    )
    db.add(entry)
    # Later stock reads in the same unit of work must see this row.
    db.flush()
    return entry


def validate_quantity(quantity: object, *, minimum: int = 1) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError.for_field("quantity", "Quantity must be a whole number.")
    if quantity < minimum:
        if minimum == 1:
            raise ValidationError.for_field("quantity", "Quantity must be at least 1.")
        raise ValidationError.for_field("quantity", f"Quantity must be at least {minimum}.")
    return quantity


def validate_direction(direction: str) -> str:
    if direction not in DIRECTIONS:
        raise ValidationError.for_field("direction", "Type must be 'in' or 'out'.")
    return direction


def apply_stock_delta(
    db: Session,
    material: Material,
    *,
    direction: str,
    quantity: int,
    reason_code: str,
    reference_id: str | None = None,
    note: str | None = None,
) -> StockChange:
    """
    Move ``quantity`` units of ``material`` in or out of the warehouse.

    The caller must hold the material row lock. Availability is checked against
    the ledger before anything is written, so a rejected ``out`` leaves no trace.
    """
    validate_direction(direction)
    validate_quantity(quantity)

    current = get_material_stock(db, material.id)
    if direction == "out" and quantity > current:
        raise InsufficientStock(available=current, requested=quantity, material_id=material.id)

    qty_delta = quantity if direction == "in" else -quantity
    entry = add_ledger_entry(
        db,
        material_id=material.id,
        material_name=material.name,
        qty_delta=qty_delta,
        reason=reason_code,
        reference_id=reference_id,
        note=note,
    )
    material.quantity = current + qty_delta
    return StockChange(
        material=material,
        previous_stock=current,
        new_stock=material.quantity,
        ledger_entry=entry,
    )


def adjust_stock(
    db: Session,
    *,
    material_id: str,
    direction: str,
    quantity: int,
    reason: str | None = None,
) -> tuple[StockChange, StockHistory]:
    validate_direction(direction)
    validate_quantity(quantity)
    material = get_material_or_404(db, material_id, for_update=True)

    reason_text = reason or ("Stock Added" if direction == "in" else "Stock Removed")
    change = apply_stock_delta(
        db,
        material,
        direction=direction,
        quantity=quantity,
        reason_code="stock_in" if direction == "in" else "stock_out",
        note=reason_text,
    )
    qty_delta = change.new_stock - change.previous_stock
    history = StockHistory(
        id=generate_shortuuid(),
        kind="adjustment",
        direction=direction,
        reason=reason_text,
        previous_stock=change.previous_stock,
        new_stock=change.new_stock,
        items=[
            {
                "material_id": material.id,
                "material_name": material.name,
                "quantity_added": qty_delta,
            }
        ],
        total_items=qty_delta,
    )
    db.add(history)
    if change.ledger_entry is not None:
        change.ledger_entry.reference_id = history.id

    log_event(
        "stock_adjusted",
        material_id=material.id,
        direction=direction,
        quantity=quantity,
        previous_stock=change.previous_stock,
        new_stock=change.new_stock,
    )
    return change, history


def set_quantity(db: Session, *, material_id: str, quantity: int) -> StockChange:
    """
    Administrative override: set stock to an absolute value.

    Never raises InsufficientStock and writes no StockHistory record. The
    ledger still gets an offsetting ``correction`` row so it stays the source
    of truth for the projection.
    """
    validate_quantity(quantity, minimum=0)
    material = get_material_or_404(db, material_id, for_update=True)

    current = get_material_stock(db, material.id)
    qty_delta = quantity - current
    entry = None
    if qty_delta:
        entry = add_ledger_entry(
            db,
            material_id=material.id,
            material_name=material.name,
            qty_delta=qty_delta,
            reason="correction",
            note=f"Quantity set to {quantity}",
        )
    material.quantity = quantity

    log_event("stock_set", material_id=material.id, previous_stock=current, new_stock=quantity)
    return StockChange(material=material, previous_stock=current, new_stock=quantity, ledger_entry=entry)


def fill_stock(db: Session, quantities: Mapping[str, int]) -> StockHistory:
    field_errors: dict[str, list[str]] = {}
    for material_id, quantity in quantities.items():
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            field_errors[material_id] = ["Quantity must be a positive number."]
    if field_errors:
        raise ValidationError(
            "Invalid data. Please ensure all quantities are positive numbers.",
            errors=field_errors,
        )

    to_add = {material_id: qty for material_id, qty in quantities.items() if qty > 0}
    if not to_add:
        raise ValidationError("No stock quantities provided.")

    materials = {
        material.id: material
        for material in db.execute(
            select(Material).where(Material.id.in_(list(to_add))).with_for_update()
        ).scalars()
    }
    missing = [material_id for material_id in to_add if material_id not in materials]
    if missing:
        raise NotFound(f"Material not found: {', '.join(missing)}")

    history_id = generate_shortuuid()
    items = []
    for material_id, quantity in to_add.items():
        material = materials[material_id]
        apply_stock_delta(
            db,
            material,
            direction="in",
            quantity=quantity,
            reason_code="fill_stock",
            reference_id=history_id,
        )
        items.append(
            {
                "material_id": material.id,
                "material_name": material.name,
                "quantity_added": quantity,
            }
        )

    history = StockHistory(
        id=history_id,
        kind="fill_stock",
        direction="in",
        reason="Stock Filled",
        items=items,
        total_items=sum(item["quantity_added"] for item in items),
    )
    db.add(history)

    log_event("stock_filled", materials=len(items), total_items=history.total_items)
    return history


def create_material(
    db: Session,
    *,
    name: str,
    description: str,
    category: str,
    quantity: int = 0,
    unit_price: float | None = None,
    gst_percent: float | None = None,
) -> Material:
    validate_quantity(quantity, minimum=0)
    material = Material(
        id=generate_shortuuid(),
        name=name,
        description=description,
        category=category,
        quantity=quantity,
        unit_price=unit_price,
        gst_percent=gst_percent,
    )
    db.add(material)
    if quantity:
        add_ledger_entry(
            db,
            material_id=material.id,
            material_name=material.name,
            qty_delta=quantity,
            reason="opening_balance",
        )
    return material


def update_pricing(db: Session, items: Iterable[PricingUpdate]) -> int:
    """
    Bulk edit of unit price, GST % and absolute quantity.

    Fields left as None are untouched. Every id is resolved before anything
    is written.
    """
    updates = list(items)
    if not updates:
        raise ValidationError("No pricing changes provided.")

    ids = [item.material_id for item in updates]
    found = set(db.execute(select(Material.id).where(Material.id.in_(ids))).scalars())
    missing = [material_id for material_id in ids if material_id not in found]
    if missing:
        raise NotFound(f"Material not found: {', '.join(missing)}")

    for item in updates:
        if item.quantity is not None:
            material = set_quantity(db, material_id=item.material_id, quantity=item.quantity).material
        else:
            material = get_material_or_404(db, item.material_id, for_update=True)
        if item.unit_price is not None:
            material.unit_price = item.unit_price
        if item.gst_percent is not None:
            material.gst_percent = item.gst_percent

    log_event("pricing_updated", materials=len(updates))
    return len(updates)


def list_low_stock(db: Session, threshold: int | None = None) -> list[Material]:
    limit_threshold = settings.low_stock_threshold if threshold is None else threshold
    return list(
        db.execute(
            select(Material)
            .where(Material.quantity <= limit_threshold)
            .order_by(Material.quantity.asc(), Material.name.asc())
        ).scalars()
    )


def rebuild_stock_levels(db: Session) -> list[tuple[Material, int, int]]:
    """Re-project every Material.quantity from the ledger; return (material, cached, ledger) for drifted rows."""
    totals = {
        material_id: int(total or 0)
        for material_id, total in db.execute(
            select(InventoryLedger.material_id, func.sum(InventoryLedger.qty_delta))
            .group_by(InventoryLedger.material_id)
        ).all()
    }

    corrected: list[tuple[Material, int, int]] = []
    for material in db.execute(select(Material).order_by(Material.name.asc()).with_for_update()).scalars():
        ledger_quantity = totals.get(material.id, 0)
        if material.quantity != ledger_quantity:
            corrected.append((material, material.quantity, ledger_quantity))
            material.quantity = ledger_quantity

    if corrected:
        log_event("stock_rebuilt", corrected=len(corrected))
    return corrected
