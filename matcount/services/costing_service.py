"""
Client costing: net usage priced at each material's unit price plus GST.

Amounts stay unrounded floats end to end; rounding to two decimals happens
only when a figure is rendered.
"""
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from matcount.core.id_utils import generate_shortuuid
from matcount.core.observability import log_event
from matcount.models.costing import CostingSnapshot
from matcount.models.material import Material
from matcount.services.usage_service import MaterialUsage, get_client_usage


class CostingLineLike(Protocol):
    material_id: str
    name: str
    qty: float
    rate: float
    gst_percent: float


@dataclass(frozen=True)
class PricedLine:
    base: float
    gst: float
    total: float


@dataclass(frozen=True)
class CostingLine:
    material_id: str
    name: str
    qty: float
    rate: float
    gst_percent: float
    base: float
    gst: float
    total: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CostingResult:
    items: list[CostingLine]
    before_tax: float
    gst: float
    grand: float

    @classmethod
    def from_lines(cls, lines: Iterable[CostingLine]) -> "CostingResult":
        items = sorted(lines, key=lambda line: line.name.casefold())
        before_tax = sum(line.base for line in items)
        gst = sum(line.gst for line in items)
        return cls(items=items, before_tax=before_tax, gst=gst, grand=before_tax + gst)


def price_line(*, qty: float, rate: float, gst_percent: float) -> PricedLine:
    base = qty * rate
    gst = base * (gst_percent / 100)
    return PricedLine(base=base, gst=gst, total=base + gst)


def _make_line(*, material_id: str, name: str, qty: float, rate: float, gst_percent: float) -> CostingLine:
    priced = price_line(qty=qty, rate=rate, gst_percent=gst_percent)
    return CostingLine(
        material_id=material_id,
        name=name,
        qty=qty,
        rate=rate,
        gst_percent=gst_percent,
        base=priced.base,
        gst=priced.gst,
        total=priced.total,
    )


def compute_costing(usage: Mapping[str, MaterialUsage], materials: Iterable[Material]) -> CostingResult:
    by_id: dict[str, Material] = {}
    by_name: dict[str, Material] = {}
    for material in materials:
        by_id[material.id] = material
        if material.name:
            by_name[material.name.casefold()] = material

    lines = []
    for material_id, entry in usage.items():
        qty = entry.net_qty
        if qty <= 0:
            continue
        # Materials deleted and re-created keep their ledger rows under the old id.
        material = by_id.get(material_id) or by_name.get(entry.material_name.casefold())
        rate = float(material.unit_price or 0) if material else 0.0
        gst_percent = float(material.gst_percent or 0) if material else 0.0
        name = entry.material_name or (material.name if material else "")
        lines.append(
            _make_line(material_id=material_id, name=name, qty=qty, rate=rate, gst_percent=gst_percent)
        )
    return CostingResult.from_lines(lines)


def costing_from_lines(lines: Iterable[CostingLineLike]) -> CostingResult:
    """Re-derive amounts for caller-supplied lines; only qty, rate and GST % are trusted."""
    return CostingResult.from_lines(
        _make_line(
            material_id=str(line.material_id or ""),
            name=str(line.name or ""),
            qty=float(line.qty or 0),
            rate=float(line.rate or 0),
            gst_percent=float(line.gst_percent or 0),
        )
        for line in lines
    )


def result_from_snapshot(snapshot: CostingSnapshot) -> CostingResult:
    return CostingResult(
        items=[CostingLine(**item) for item in snapshot.items or []],
        before_tax=snapshot.before_tax,
        gst=snapshot.gst,
        grand=snapshot.grand,
    )


def build_client_costing(db: Session, client_id: str) -> CostingResult:
    usage = get_client_usage(db, client_id)
    material_ids = list(usage)
    materials: list[Material] = []
    if material_ids:
        names = [entry.material_name.lower() for entry in usage.values() if entry.material_name]
        materials = list(
            db.execute(
                select(Material).where(
                    or_(Material.id.in_(material_ids), func.lower(Material.name).in_(names))
                )
            ).scalars()
        )
    return compute_costing(usage, materials)


def get_snapshot(db: Session, client_id: str) -> CostingSnapshot | None:
    return db.execute(
        select(CostingSnapshot).where(CostingSnapshot.client_id == client_id)
    ).scalar_one_or_none()


def get_costing(db: Session, client_id: str) -> tuple[CostingResult, CostingSnapshot | None]:
    """Stored snapshot when there is one, otherwise a fresh (unsaved) computation."""
    snapshot = get_snapshot(db, client_id)
    if snapshot is not None:
        return result_from_snapshot(snapshot), snapshot
    return build_client_costing(db, client_id), None


def save_snapshot(db: Session, client_id: str, result: CostingResult, *, is_manual: bool) -> CostingSnapshot:
    snapshot = get_snapshot(db, client_id)
    if snapshot is None:
        snapshot = CostingSnapshot(id=generate_shortuuid(), client_id=client_id)
        db.add(snapshot)
    snapshot.items = [line.to_dict() for line in result.items]
    snapshot.before_tax = result.before_tax
    snapshot.gst = result.gst
    snapshot.grand = result.grand
    snapshot.is_manual = is_manual
    snapshot.updated_at = datetime.now(timezone.utc)
    return snapshot


def save_manual_costing(db: Session, client_id: str, lines: Iterable[CostingLineLike]) -> CostingSnapshot:
    snapshot = save_snapshot(db, client_id, costing_from_lines(lines), is_manual=True)
    log_event("costing_saved", client_id=client_id, manual=True, grand=snapshot.grand)
    return snapshot


def recompute_costing(db: Session, client_id: str) -> CostingSnapshot:
    """Throw away any manual edits and rebuild strictly from the ledger."""
    snapshot = save_snapshot(db, client_id, build_client_costing(db, client_id), is_manual=False)
    log_event("costing_saved", client_id=client_id, manual=False, grand=snapshot.grand)
    return snapshot


def refresh_costing_snapshot(db: Session, client_id: str) -> CostingSnapshot | None:
    """Called after every client transaction; leaves manual snapshots alone."""
    snapshot = get_snapshot(db, client_id)
    if snapshot is not None and snapshot.is_manual:
        return None
    return save_snapshot(db, client_id, build_client_costing(db, client_id), is_manual=False)
