from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from matcount.core.api_docs import error_responses
from matcount.core.deps import commit_or_raise, get_db
from matcount.models.inventory import InventoryLedger, StockHistory
from matcount.schemas.common import PaginationMeta
from matcount.schemas.inventory import (
    FillStockIn,
    FillStockOut,
    InventoryLedgerEntryOut,
    InventoryLedgerListOut,
    SetQuantityIn,
    SetQuantityOut,
    StockAdjustIn,
    StockAdjustOut,
    StockHistoryOut,
    StockLevelOut,
)
from matcount.schemas.material import MaterialOut
from matcount.services.inventory_service import (
    adjust_stock,
    fill_stock,
    get_material_or_404,
    get_material_stock,
    list_low_stock,
    set_quantity,
)

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.post(
    "/adjust",
    response_model=StockAdjustOut,
    summary="Add or remove stock for one material",
    responses=error_responses(404, 409, 422, 500, conflict="insufficient_stock"),
)
def adjust_stock_route(payload: StockAdjustIn, db: Session = Depends(get_db)):
    change, _history = adjust_stock(
        db,
        material_id=payload.material_id,
        direction=payload.direction,
        quantity=payload.quantity,
        reason=payload.reason,
    )
    commit_or_raise(db)
    return StockAdjustOut(
        message="Stock updated successfully.",
        material_id=change.material.id,
        previous_stock=change.previous_stock,
        new_stock=change.new_stock,
    )


@router.post(
    "/set-quantity",
    response_model=SetQuantityOut,
    summary="Set a material's stock to an absolute value",
    responses=error_responses(404, 422, 500),
)
def set_quantity_route(payload: SetQuantityIn, db: Session = Depends(get_db)):
    change = set_quantity(db, material_id=payload.material_id, quantity=payload.quantity)
    commit_or_raise(db)
    return SetQuantityOut(
        message="Quantity updated.",
        material_id=change.material.id,
        quantity=change.new_stock,
    )


@router.post(
    "/fill",
    response_model=FillStockOut,
    summary="Add stock to many materials at once",
    responses=error_responses(404, 422, 500),
)
def fill_stock_route(payload: FillStockIn, db: Session = Depends(get_db)):
    history = fill_stock(db, payload.quantities)
    commit_or_raise(db)
    db.refresh(history)
    return FillStockOut(
        message="Stock filled successfully.",
        history=StockHistoryOut.model_validate(history),
    )


@router.get(
    "/history",
    response_model=list[StockHistoryOut],
    summary="List stock history, newest first",
    responses=error_responses(422, 500),
)
def list_stock_history(
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    rows = db.execute(
        select(StockHistory).order_by(StockHistory.created_at.desc()).limit(limit)
    ).scalars().all()
    return [StockHistoryOut.model_validate(row) for row in rows]


@router.get(
    "/ledger",
    response_model=InventoryLedgerListOut,
    summary="List inventory ledger entries",
    responses={
        200: {
            "description": "Paginated inventory ledger",
            "content": {
                "application/json": {
                    "example": {
                        "items": [
                            {
                                "id": "ledger-id",
                                "material_id": "material-id",
                                "material_name": "Bolt",
                                "qty_delta": -10,
                                "reason": "client_dispatch",
                                "reference_id": "transaction-id",
                                "note": "Client Dispatch",
                                "created_at": "2026-10-16T10:00:00Z",
                            }
                        ],
                        "pagination": {
                            "total": 12,
                            "limit": 50,
                            "offset": 0,
                            "count": 1,
                            "has_next": True,
                        },
                    }
                }
            },
        },
        **error_responses(422, 500),
    },
)
def list_inventory_ledger(
    material_id: str | None = Query(default=None, description="Optional material filter"),
    limit: int = Query(default=50, ge=1, le=200, description="Page size"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: Session = Depends(get_db),
):
    # Ledger rows outlive deleted materials, so the filter does not require the material to exist.
    count_stmt = select(func.count(InventoryLedger.id))
    stmt = select(InventoryLedger)
    if material_id:
        count_stmt = count_stmt.where(InventoryLedger.material_id == material_id)
        stmt = stmt.where(InventoryLedger.material_id == material_id)

    total = int(db.execute(count_stmt).scalar_one())
    stmt = stmt.order_by(InventoryLedger.created_at.desc()).offset(offset).limit(limit)
    items = [InventoryLedgerEntryOut.model_validate(row) for row in db.execute(stmt).scalars().all()]
    count = len(items)
    return InventoryLedgerListOut(
        items=items,
        pagination=PaginationMeta(
            total=total,
            limit=limit,
            offset=offset,
            count=count,
            has_next=(offset + count) < total,
        ),
    )


@router.get(
    "/stock/{material_id}",
    response_model=StockLevelOut,
    summary="Stock level for a material, summed from the ledger",
    responses=error_responses(404, 500),
)
def get_stock(material_id: str, db: Session = Depends(get_db)):
    material = get_material_or_404(db, material_id)
    return StockLevelOut(
        material_id=material.id,
        stock=get_material_stock(db, material.id),
        cached_quantity=material.quantity,
    )


@router.get(
    "/low-stock",
    response_model=list[MaterialOut],
    summary="Materials at or below the low-stock threshold",
    responses=error_responses(422, 500),
)
def list_low_stock_materials(
    threshold: int | None = Query(
        default=None,
        ge=0,
        description="Optional threshold override. Defaults to the configured low-stock threshold.",
    ),
    db: Session = Depends(get_db),
):
    return [MaterialOut.model_validate(row) for row in list_low_stock(db, threshold)]
