"""
Full export / import of every table.

A restore replaces everything in one unit of work. Backups taken before the
inventory ledger existed carry no ledger rows; opening balances are written
for them so stock stays derivable from the ledger.
"""
from collections import Counter
from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from matcount.core.errors import DuplicateKey, PersistenceError, ValidationError
from matcount.core.observability import log_event
from matcount.models.client import Client
from matcount.models.client_transaction import ClientTransaction
from matcount.models.costing import CostingSnapshot
from matcount.models.inventory import InventoryLedger, StockHistory
from matcount.models.material import Material
from matcount.schemas.admin import (
    BackupClient,
    BackupClientTransaction,
    BackupCosting,
    BackupData,
    BackupLedgerEntry,
    BackupMaterial,
    BackupStockHistory,
)
from matcount.services.client_service import create_client
from matcount.services.costing_service import costing_from_lines, save_snapshot
from matcount.services.inventory_service import add_ledger_entry, create_material, get_material_stock

BACKUP_VERSION = 1

DEMO_MATERIALS = [
    {"name": "Steel Beams", "description": "20ft, I-beam profile", "quantity": 50, "category": "Fabrication"},
    {"name": "Concrete Mix", "description": "High-strength, 50lb bags", "quantity": 200, "category": "Other"},
    {"name": "Plywood Sheets", "description": "4x8ft, 3/4 inch thickness", "quantity": 150, "category": "Fabrication"},
    {"name": "Solar Panels", "description": "450W Monocrystalline", "quantity": 300, "category": "Wiring"},
    {"name": "Inverter", "description": "5kW String Inverter", "quantity": 30, "category": "Wiring"},
]

DEMO_CLIENTS = [
    {"name": "Innovate Inc.", "address": "123 Tech Park, Silicon Valley, CA", "plant_capacity": "100 kW", "consumer_no": "100000012345"},
    {"name": "Apex Construction", "address": "456 Builder Ave, Metropolis, NY", "plant_capacity": "50 kW", "consumer_no": "200000067890"},
    {"name": "Synergy Corp.", "address": "789 Trade St, Commerce City, TX", "plant_capacity": "250 kW", "consumer_no": "300000054321"},
    {"name": "Pioneer Builders", "address": "101 Frontier Rd, Greenfield, IN", "plant_capacity": "10 kW", "consumer_no": "400000098765"},
]


def export_data(db: Session) -> BackupData:
    materials = db.execute(select(Material).order_by(Material.category.asc(), Material.name.asc())).scalars()
    clients = db.execute(select(Client).order_by(Client.name.asc())).scalars()
    history = db.execute(select(StockHistory).order_by(StockHistory.created_at.asc())).scalars()
    transactions = db.execute(select(ClientTransaction).order_by(ClientTransaction.created_at.asc())).scalars()
    ledger = db.execute(select(InventoryLedger).order_by(InventoryLedger.created_at.asc())).scalars()
    snapshots = db.execute(select(CostingSnapshot)).scalars()

    return BackupData(
        version=BACKUP_VERSION,
        exported_at=datetime.now(timezone.utc),
        materials=[BackupMaterial.model_validate(row) for row in materials],
        clients=[BackupClient.model_validate(row) for row in clients],
        stock_history=[BackupStockHistory.model_validate(row) for row in history],
        client_transactions=[BackupClientTransaction.model_validate(row) for row in transactions],
        inventory_ledger=[BackupLedgerEntry.model_validate(row) for row in ledger],
        costing=[
            BackupCosting(client_id=row.client_id, items=row.items or [], is_manual=row.is_manual)
            for row in snapshots
        ],
    )


def _clear_all(db: Session) -> None:
    for model in (CostingSnapshot, ClientTransaction, InventoryLedger, StockHistory, Client, Material):
        db.execute(delete(model))


def _duplicates(values) -> list[str]:
    return sorted(value for value, count in Counter(values).items() if count > 1)


def _check_restorable(backup: BackupData) -> None:
    """Reject a backup that would break a unique column before anything is deleted."""
    errors: dict[str, list[str]] = {}
    for field, rows in (
        ("materials", backup.materials),
        ("clients", backup.clients),
        ("stock_history", backup.stock_history),
        ("client_transactions", backup.client_transactions),
        ("inventory_ledger", backup.inventory_ledger),
    ):
        dupes = _duplicates(row.id for row in rows)
        if dupes:
            errors[field] = [f"Duplicate id: {value}" for value in dupes]
    dupes = _duplicates(entry.client_id for entry in backup.costing)
    if dupes:
        errors["costing"] = [f"Duplicate client_id: {value}" for value in dupes]
    if errors:
        raise ValidationError("Backup contains duplicate records.", errors=errors)

    dupes = _duplicates(row.consumer_no for row in backup.clients)
    if dupes:
        raise DuplicateKey(
            "Backup contains clients sharing a consumer number.",
            errors={"consumer_no": [f"Duplicate consumer number: {value}" for value in dupes]},
        )


def restore_data(db: Session, backup: BackupData) -> dict[str, int]:
    _check_restorable(backup)
    _clear_all(db)

    for item in backup.materials:
        db.add(Material(**item.model_dump()))
    for item in backup.clients:
        db.add(Client(**item.model_dump()))
    for item in backup.stock_history:
        db.add(StockHistory(**item.model_dump()))
    for item in backup.client_transactions:
        db.add(ClientTransaction(**item.model_dump()))
    for item in backup.inventory_ledger:
        db.add(InventoryLedger(**item.model_dump()))
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise PersistenceError("Failed to restore backup. No changes were saved.") from exc

    # Material quantities in the file win; the ledger is topped up to match them.
    for item in backup.materials:
        drift = item.quantity - get_material_stock(db, item.id)
        if drift:
            add_ledger_entry(
                db,
                material_id=item.id,
                material_name=item.name,
                qty_delta=drift,
                reason="opening_balance" if not backup.inventory_ledger else "correction",
                note="Restored from backup",
            )

    client_ids = {item.id for item in backup.clients}
    for entry in backup.costing:
        if entry.client_id not in client_ids:
            continue
        save_snapshot(db, entry.client_id, costing_from_lines(entry.items), is_manual=entry.is_manual)

    counts = {
        "materials": len(backup.materials),
        "clients": len(backup.clients),
        "client_transactions": len(backup.client_transactions),
        "stock_history": len(backup.stock_history),
        "inventory_ledger": int(db.execute(select(func.count(InventoryLedger.id))).scalar_one()),
    }
    log_event("data_restored", **counts)
    return counts


def seed_demo_data(db: Session) -> dict[str, int] | None:
    """Insert demo materials and clients. Returns None when materials already exist."""
    has_materials = db.execute(select(Material.id).limit(1)).scalar_one_or_none() is not None
    if has_materials:
        return None

    for item in DEMO_MATERIALS:
        create_material(db, **item)
    for item in DEMO_CLIENTS:
        create_client(db, **item)

    log_event("data_seeded", materials=len(DEMO_MATERIALS), clients=len(DEMO_CLIENTS))
    return {"materials": len(DEMO_MATERIALS), "clients": len(DEMO_CLIENTS)}
