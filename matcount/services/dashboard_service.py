from collections import defaultdict

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from matcount.core.config import settings
from matcount.models.client import Client
from matcount.models.client_transaction import ClientTransaction
from matcount.models.material import Material
from matcount.services.costing_service import price_line
from matcount.services.usage_service import compute_usage


def get_outstanding_by_material(db: Session) -> list[dict]:
    """Quantity currently out with clients, per material, summed over every client."""
    by_client: dict[str, list[ClientTransaction]] = defaultdict(list)
    for txn in db.execute(select(ClientTransaction)).scalars():
        by_client[txn.client_id].append(txn)

    totals: dict[str, dict] = {}
    for transactions in by_client.values():
        for material_id, usage in compute_usage(transactions).items():
            current = totals.setdefault(
                material_id,
                {
                    "material_id": material_id,
                    "material_name": usage.material_name,
                    "out_qty": 0,
                    "in_qty": 0,
                    "net_qty": 0,
                    "clients": 0,
                },
            )
            current["out_qty"] += usage.out_qty
            current["in_qty"] += usage.in_qty
            current["net_qty"] += usage.net_qty
            if usage.net_qty > 0:
                current["clients"] += 1

    return sorted(
        (row for row in totals.values() if row["net_qty"] > 0),
        key=lambda row: (-row["net_qty"], row["material_name"].casefold()),
    )


def get_summary(db: Session) -> dict:
    threshold = settings.low_stock_threshold
    materials = db.execute(select(Material)).scalars().all()

    value_before_tax = 0.0
    value_with_gst = 0.0
    for material in materials:
        priced = price_line(
            qty=material.quantity,
            rate=float(material.unit_price or 0),
            gst_percent=float(material.gst_percent or 0),
        )
        value_before_tax += priced.base
        value_with_gst += priced.total

    total_clients = int(db.execute(select(func.count(Client.id))).scalar_one())
    total_transactions = int(db.execute(select(func.count(ClientTransaction.id))).scalar_one())

    return {
        "total_materials": len(materials),
        "total_stock_units": sum(material.quantity for material in materials),
        "low_stock_count": sum(1 for material in materials if material.quantity <= threshold),
        "low_stock_threshold": threshold,
        "total_clients": total_clients,
        "total_transactions": total_transactions,
        "inventory_value_before_tax": value_before_tax,
        "inventory_value_with_gst": value_with_gst,
        "outstanding": get_outstanding_by_material(db),
    }
