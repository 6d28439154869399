"""
Per-client material usage.

Usage is a fold over the client's transaction ledger: for every material the
dispatched ("out") and returned ("in") quantities are summed independently, so
the result does not depend on the order transactions are read in.
"""
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from matcount.models.client_transaction import ClientTransaction


class TransactionLike(Protocol):
    direction: str
    items: list[dict[str, Any]]


@dataclass
class MaterialUsage:
    material_id: str
    material_name: str
    out_qty: int = 0
    in_qty: int = 0

    @property
    def net_qty(self) -> int:
        return max(0, self.out_qty - self.in_qty)


def compute_usage(transactions: Iterable[TransactionLike]) -> dict[str, MaterialUsage]:
    usage: dict[str, MaterialUsage] = {}
    for txn in transactions:
        if txn.direction not in ("in", "out"):
            continue
        for item in txn.items or []:
            material_id = str(item.get("material_id") or "")
            if not material_id:
                continue
            name = str(item.get("material_name") or "")
            qty = int(item.get("quantity") or 0)

            current = usage.get(material_id)
            if current is None:
                current = usage[material_id] = MaterialUsage(material_id=material_id, material_name=name)
            elif not current.material_name:
                current.material_name = name

            if txn.direction == "out":
                current.out_qty += qty
            else:
                current.in_qty += qty
    return usage


def net_quantity_totals(usage: dict[str, MaterialUsage]) -> tuple[int, int, int]:
    """(total_out, total_in, net) across every material of one client."""
    total_out = sum(u.out_qty for u in usage.values())
    total_in = sum(u.in_qty for u in usage.values())
    net = sum(u.net_qty for u in usage.values())
    return total_out, total_in, net


def list_client_transactions(db: Session, client_id: str, *, newest_first: bool = True) -> list[ClientTransaction]:
    order = ClientTransaction.created_at.desc() if newest_first else ClientTransaction.created_at.asc()
    return list(
        db.execute(
            select(ClientTransaction)
            .where(ClientTransaction.client_id == client_id)
            .order_by(order)
        ).scalars()
    )


def get_client_usage(db: Session, client_id: str) -> dict[str, MaterialUsage]:
    # Oldest first, so each material keeps the name it was first dispatched under.
    return compute_usage(list_client_transactions(db, client_id, newest_first=False))
