from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from matcount.core.api_docs import error_responses
from matcount.core.deps import commit_or_raise, get_db
from matcount.core.money import format_money
from matcount.models.costing import CostingSnapshot
from matcount.schemas.costing import CostingLineOut, CostingOut, CostingSaveIn
from matcount.services.client_service import get_client_or_404
from matcount.services.costing_service import (
    CostingResult,
    get_costing,
    recompute_costing,
    result_from_snapshot,
    save_manual_costing,
)
from matcount.services.pdf_export_service import build_text_pdf

router = APIRouter(prefix="/client-costing", tags=["costing"])


def _costing_out(client_id: str, result: CostingResult, snapshot: CostingSnapshot | None) -> CostingOut:
    return CostingOut(
        id=snapshot.id if snapshot else None,
        client_id=client_id,
        items=[CostingLineOut(**line.to_dict()) for line in result.items],
        before_tax=result.before_tax,
        gst=result.gst,
        grand=result.grand,
        is_manual=bool(snapshot and snapshot.is_manual),
        persisted=snapshot is not None,
        updated_at=(snapshot.updated_at if snapshot and snapshot.updated_at else datetime.now(timezone.utc)),
    )


@router.get(
    "/{client_id}",
    response_model=CostingOut,
    summary="Get a client's costing",
    description="Returns the stored snapshot when one exists, otherwise computes it from the client's usage.",
    responses=error_responses(404, 500),
)
def get_client_costing(client_id: str, db: Session = Depends(get_db)):
    get_client_or_404(db, client_id)
    result, snapshot = get_costing(db, client_id)
    return _costing_out(client_id, result, snapshot)


@router.put(
    "/{client_id}",
    response_model=CostingOut,
    summary="Save edited costing lines",
    description="Only qty, rate and gst_percent are read from each line; amounts and totals are recalculated.",
    responses=error_responses(404, 422, 500),
)
def save_client_costing(client_id: str, payload: CostingSaveIn, db: Session = Depends(get_db)):
    get_client_or_404(db, client_id)
    snapshot = save_manual_costing(db, client_id, payload.items)
    commit_or_raise(db)
    db.refresh(snapshot)
    return _costing_out(client_id, result_from_snapshot(snapshot), snapshot)


@router.post(
    "/{client_id}/recompute",
    response_model=CostingOut,
    summary="Discard manual edits and rebuild costing from usage",
    responses=error_responses(404, 500),
)
def recompute_client_costing(client_id: str, db: Session = Depends(get_db)):
    get_client_or_404(db, client_id)
    snapshot = recompute_costing(db, client_id)
    commit_or_raise(db)
    db.refresh(snapshot)
    return _costing_out(client_id, result_from_snapshot(snapshot), snapshot)


@router.get(
    "/{client_id}/pdf",
    summary="Download a client's costing as PDF",
    responses=error_responses(404, 500),
)
def download_client_costing_pdf(client_id: str, db: Session = Depends(get_db)):
    client = get_client_or_404(db, client_id)
    result, _snapshot = get_costing(db, client_id)

    lines: list[str] = [
        f"Client: {client.name}",
        f"Consumer No.: {client.consumer_no}",
        f"Address: {client.address}",
        f"Plant Capacity: {client.plant_capacity}",
        "",
        f"{'Material':<28}{'Qty':>8}{'Rate':>12}{'GST%':>7}{'Total':>14}",
        "-" * 69,
    ]
    for line in result.items:
        qty = f"{line.qty:g}"
        lines.append(
            f"{line.name[:27]:<28}{qty:>8}{format_money(line.rate):>12}"
            f"{line.gst_percent:>6g}%{format_money(line.total):>14}"
        )
    lines.extend(
        [
            "-" * 69,
            f"{'Total before tax:':<55}{format_money(result.before_tax):>14}",
            f"{'GST:':<55}{format_money(result.gst):>14}",
            f"{'Grand total:':<55}{format_money(result.grand):>14}",
        ]
    )

    pdf_bytes = build_text_pdf(title="Material Costing", lines=lines)
    filename = f"costing-{client.consumer_no}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
