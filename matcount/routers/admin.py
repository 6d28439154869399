from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from matcount.core.api_docs import error_responses
from matcount.core.deps import commit_or_raise, get_db
from matcount.schemas.admin import BackupData, RestoreOut, SeedOut
from matcount.schemas.inventory import StockRebuildItemOut, StockRebuildOut
from matcount.services.backup_service import export_data, restore_data, seed_demo_data
from matcount.services.inventory_service import rebuild_stock_levels

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/backup",
    response_model=BackupData,
    summary="Export every table as JSON",
    responses=error_responses(500),
)
def backup(db: Session = Depends(get_db)):
    return export_data(db)


@router.post(
    "/restore",
    response_model=RestoreOut,
    summary="Replace all data from a backup",
    description="Existing materials, clients, history and costing are deleted first. Runs as one transaction.",
    responses=error_responses(409, 422, 500, conflict="duplicate_key"),
)
def restore(payload: BackupData, db: Session = Depends(get_db)):
    counts = restore_data(db, payload)
    commit_or_raise(db)
    return RestoreOut(message="Data restored successfully from backup.", **counts)


@router.post(
    "/seed",
    response_model=SeedOut,
    summary="Load demo materials and clients into an empty database",
    responses=error_responses(500),
)
def seed(db: Session = Depends(get_db)):
    counts = seed_demo_data(db)
    if counts is None:
        return SeedOut(success=False, message="Data already exists. Seeding skipped.")
    commit_or_raise(db)
    return SeedOut(success=True, message="Dummy data seeded successfully!", **counts)


@router.post(
    "/rebuild-stock",
    response_model=StockRebuildOut,
    summary="Recalculate every material's quantity from the inventory ledger",
    responses=error_responses(500),
)
def rebuild_stock(db: Session = Depends(get_db)):
    corrected = rebuild_stock_levels(db)
    commit_or_raise(db)
    return StockRebuildOut(
        message=f"{len(corrected)} material(s) corrected.",
        corrected=[
            StockRebuildItemOut(
                material_id=material.id,
                name=material.name,
                cached_quantity=cached,
                ledger_quantity=ledger,
            )
            for material, cached, ledger in corrected
        ],
    )
