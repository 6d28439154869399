import pytest


def _create_material(client, *, name: str, quantity: int, **extra) -> dict:
    res = client.post(
        "/materials",
        json={"name": name, "description": f"{name} description", "quantity": quantity, "category": "Hardware", **extra},
    )
    assert res.status_code == 200, res.text
    return res.json()["material"]


def _create_client(client, *, name: str, consumer_no: str) -> dict:
    res = client.post(
        "/clients",
        json={"name": name, "address": "1 Grid Road", "plant_capacity": "5 kW", "consumer_no": consumer_no},
    )
    assert res.status_code == 200, res.text
    return res.json()["client"]


def _transact(client, client_id: str, material_id: str, quantity: int, direction: str) -> None:
    res = client.post(
        f"/clients/{client_id}/transactions",
        json={"material_id": material_id, "quantity": quantity, "direction": direction},
    )
    assert res.status_code == 200, res.text


def test_health_endpoints(test_context):
    client, _ = test_context

    assert client.get("/health").json() == {"ok": True}
    assert client.get("/ready").json() == {"ok": True}
    root = client.get("/").json()
    assert root["docs"] == "/docs"


def test_dashboard_summary(test_context):
    client, _ = test_context
    panel = _create_material(client, name="Panel", quantity=20, unit_price=2.0, gst_percent=18)
    _create_material(client, name="Clamp", quantity=5)
    first = _create_client(client, name="First", consumer_no="111111111111")
    second = _create_client(client, name="Second", consumer_no="222222222222")

    _transact(client, first["id"], panel["id"], 10, "out")
    _transact(client, second["id"], panel["id"], 3, "out")
    _transact(client, second["id"], panel["id"], 1, "in")

    res = client.get("/dashboard/summary")
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["total_materials"] == 2
    assert body["total_stock_units"] == 13
    assert body["low_stock_count"] == 2
    assert body["low_stock_threshold"] == 10
    assert body["total_clients"] == 2
    assert body["total_transactions"] == 3
    assert body["inventory_value_before_tax"] == pytest.approx(16.0)
    assert body["inventory_value_with_gst"] == pytest.approx(18.88)
    assert body["outstanding"] == [
        {
            "material_id": panel["id"],
            "material_name": "Panel",
            "out_qty": 13,
            "in_qty": 1,
            "net_qty": 12,
            "clients": 2,
        }
    ]


def test_seed_only_runs_on_empty_database(test_context):
    client, _ = test_context

    first = client.post("/admin/seed")
    assert first.status_code == 200, first.text
    assert first.json() == {
        "success": True,
        "message": "Dummy data seeded successfully!",
        "materials": 5,
        "clients": 4,
    }
    assert len(client.get("/materials").json()) == 5
    assert len(client.get("/clients").json()) == 4

    second = client.post("/admin/seed")
    assert second.json()["success"] is False
    assert second.json()["message"] == "Data already exists. Seeding skipped."
    assert len(client.get("/materials").json()) == 5


def test_backup_and_restore_round_trip(test_context):
    client, _ = test_context
    bolt = _create_material(client, name="Bolt", quantity=40, unit_price=2.0, gst_percent=18)
    cable = _create_material(client, name="Cable", quantity=0)
    owner = _create_client(client, name="Owner", consumer_no="123123123123")
    fill = client.post("/inventory/fill", json={"quantities": {cable["id"]: 8}})
    assert fill.status_code == 200, fill.text
    _transact(client, owner["id"], bolt["id"], 10, "out")
    saved = client.put(
        f"/client-costing/{owner['id']}",
        json={"items": [{"material_id": bolt["id"], "name": "Bolt", "qty": 4, "rate": 2.0, "gst_percent": 18}]},
    )
    assert saved.status_code == 200, saved.text

    backup = client.get("/admin/backup").json()
    assert backup["version"] == 1
    assert len(backup["inventory_ledger"]) == 3

    materials_before = client.get("/materials").json()
    transactions_before = client.get(f"/clients/{owner['id']}/transactions").json()

    # Diverge from the backup, then restore it.
    assert client.delete(f"/clients/{owner['id']}").status_code == 200
    _create_material(client, name="Stray", quantity=1)

    restored = client.post("/admin/restore", json=backup)
    assert restored.status_code == 200, restored.text
    assert restored.json()["materials"] == 2
    assert restored.json()["clients"] == 1
    assert restored.json()["client_transactions"] == 1
    assert restored.json()["stock_history"] == 1
    assert restored.json()["inventory_ledger"] == 3

    def _comparable(rows):
        return [{k: v for k, v in row.items() if k not in ("created_at", "updated_at")} for row in rows]

    assert _comparable(client.get("/materials").json()) == _comparable(materials_before)
    assert client.get(f"/clients/{owner['id']}/transactions").json() == transactions_before

    costing = client.get(f"/client-costing/{owner['id']}").json()
    assert costing["is_manual"] is True
    assert costing["grand"] == pytest.approx(9.44)

    for material in materials_before:
        stock = client.get(f"/inventory/stock/{material['id']}").json()
        assert stock["stock"] == stock["cached_quantity"] == material["quantity"]


def test_restore_without_ledger_writes_opening_balances(test_context):
    client, _ = test_context
    payload = {
        "materials": [
            {"id": "mat-1", "name": "Panel", "description": "540W", "quantity": 12, "category": "Panels"},
        ],
        "clients": [
            {
                "id": "client-1",
                "name": "Legacy Client",
                "consumer_no": "555555555555",
                "address": "Old Town",
                "plant_capacity": "3 kW",
            }
        ],
        "stock_history": [],
    }

    res = client.post("/admin/restore", json=payload)
    assert res.status_code == 200, res.text
    assert res.json()["inventory_ledger"] == 1

    stock = client.get("/inventory/stock/mat-1").json()
    assert stock == {"material_id": "mat-1", "stock": 12, "cached_quantity": 12}
    ledger = client.get("/inventory/ledger", params={"material_id": "mat-1"}).json()
    assert ledger["items"][0]["reason"] == "opening_balance"


def test_restore_rejects_malformed_backup(test_context):
    client, _ = test_context
    res = client.post("/admin/restore", json={"materials": "nope"})
    assert res.status_code == 422
    assert res.json()["error"]["code"] == "validation_error"


def _legacy_client(client_id: str, consumer_no: str) -> dict:
    return {
        "id": client_id,
        "name": f"Client {client_id}",
        "consumer_no": consumer_no,
        "address": "Old Town",
        "plant_capacity": "3 kW",
    }


def test_restore_rejects_malformed_line_items(test_context):
    client, _ = test_context
    keeper = _create_client(client, name="Keeper", consumer_no="777777777777")

    payload = {
        "materials": [{"id": "m1", "name": "Panel", "quantity": 4, "category": "Panels"}],
        "clients": [_legacy_client("c1", "555555555555")],
        "client_transactions": [
            {
                "id": "t1",
                "client_id": "c1",
                "direction": "out",
                "title": "Client Dispatch",
                "items": [{"material_id": "m1", "quantity": "lots"}],
                "created_at": "2024-05-01T10:00:00Z",
            }
        ],
        "stock_history": [
            {
                "id": "h1",
                "kind": "bulk_add",
                "items": [{"material_id": "m1", "quantity_added": 4}],
                "total_items": 4,
                "created_at": "2024-05-01T09:00:00Z",
            }
        ],
    }
    res = client.post("/admin/restore", json=payload)
    assert res.status_code == 422, res.text
    errors = res.json()["errors"]
    assert "client_transactions.0.items.0.quantity" in errors
    assert "client_transactions.0.items.0.material_name" in errors
    assert "stock_history.0.items.0.material_name" in errors

    # Nothing was cleared.
    assert [row["id"] for row in client.get("/clients").json()] == [keeper["id"]]


def test_restore_rejects_duplicate_ids_without_clearing(test_context):
    client, _ = test_context
    panel = _create_material(client, name="Panel", quantity=3)
    material = {"id": "m1", "name": "Panel", "quantity": 4, "category": "Panels"}

    res = client.post("/admin/restore", json={"materials": [material, material], "clients": [], "stock_history": []})
    assert res.status_code == 422, res.text
    body = res.json()
    assert body["error"]["code"] == "validation_error"
    assert body["errors"] == {"materials": ["Duplicate id: m1"]}

    assert [row["id"] for row in client.get("/materials").json()] == [panel["id"]]


def test_restore_rejects_shared_consumer_numbers(test_context):
    client, _ = test_context
    payload = {
        "materials": [],
        "clients": [_legacy_client("c1", "555555555555"), _legacy_client("c2", "555555555555")],
        "stock_history": [],
    }

    res = client.post("/admin/restore", json=payload)
    assert res.status_code == 409, res.text
    body = res.json()
    assert body["error"]["code"] == "duplicate_key"
    assert body["errors"] == {"consumer_no": ["Duplicate consumer number: 555555555555"]}
