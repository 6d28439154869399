from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from matcount.core.id_utils import generate_shortuuid
from matcount.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InventoryLedger(Base):
    """
    One row per stock movement. Positive = stock in. Negative = stock out.

    Append-only. No foreign key on ``material_id``: rows outlive hard-deleted
    materials, so the material name is copied onto each row.
    """
    __tablename__ = "inventory_ledger"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    material_id: Mapped[str] = mapped_column(String(36), index=True)
    material_name: Mapped[str] = mapped_column(String(255), nullable=False)

    qty_delta: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(50), nullable=False)  # "stock_in", "client_dispatch", "correction"
    reference_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)  # e.g. client transaction id
    note: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_inventory_ledger_material_created_at", "material_id", "created_at"),
    )


class StockHistory(Base):
    """Operator-facing stock events: single adjustments and consolidated fills."""
    __tablename__ = "stock_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)  # "adjustment" | "fill_stock"
    direction: Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    previous_stock: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    new_stock: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # [{"material_id", "material_name", "quantity_added"}]
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    total_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), index=True
    )
