import pytest


def _setup_bolt_client(client, *, dispatched: int = 10) -> tuple[dict, dict]:
    material_res = client.post(
        "/materials",
        json={
            "name": "Bolt",
            "description": "M10 hex bolt",
            "quantity": 100,
            "category": "Fasteners",
            "unit_price": 2.0,
            "gst_percent": 18,
        },
    )
    assert material_res.status_code == 200, material_res.text
    client_res = client.post(
        "/clients",
        json={
            "name": "Ravi Patel",
            "address": "12 Sun Street, Ahmedabad",
            "plant_capacity": "5 kW",
            "consumer_no": "100200300400",
        },
    )
    assert client_res.status_code == 200, client_res.text
    material = material_res.json()["material"]
    owner = client_res.json()["client"]
    if dispatched:
        _dispatch(client, owner["id"], material["id"], dispatched)
    return material, owner


def _dispatch(client, client_id: str, material_id: str, quantity: int) -> None:
    res = client.post(
        f"/clients/{client_id}/transactions",
        json={"material_id": material_id, "quantity": quantity, "direction": "out"},
    )
    assert res.status_code == 200, res.text


def test_costing_is_snapshotted_after_each_transaction(test_context):
    client, _ = test_context
    bolt, owner = _setup_bolt_client(client)

    res = client.get(f"/client-costing/{owner['id']}")
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["persisted"] is True
    assert body["is_manual"] is False
    assert len(body["items"]) == 1
    line = body["items"][0]
    assert line["material_id"] == bolt["id"]
    assert line["qty"] == 10
    assert line["base"] == pytest.approx(20.0)
    assert line["gst"] == pytest.approx(3.6)
    assert line["total"] == pytest.approx(23.6)
    assert body["grand"] == pytest.approx(23.6)

    _dispatch(client, owner["id"], bolt["id"], 5)
    assert client.get(f"/client-costing/{owner['id']}").json()["items"][0]["qty"] == 15


def test_manual_costing_survives_transactions_until_recompute(test_context):
    client, _ = test_context
    bolt, owner = _setup_bolt_client(client)

    saved = client.put(
        f"/client-costing/{owner['id']}",
        json={
            "items": [
                {"material_id": bolt["id"], "name": "Bolt", "qty": 5, "rate": 2.0, "gst_percent": 18},
            ]
        },
    )
    assert saved.status_code == 200, saved.text
    assert saved.json()["is_manual"] is True
    assert saved.json()["grand"] == pytest.approx(11.8)

    _dispatch(client, owner["id"], bolt["id"], 2)
    after_dispatch = client.get(f"/client-costing/{owner['id']}").json()
    assert after_dispatch["is_manual"] is True
    assert after_dispatch["grand"] == pytest.approx(11.8)

    recomputed = client.post(f"/client-costing/{owner['id']}/recompute")
    assert recomputed.status_code == 200, recomputed.text
    body = recomputed.json()
    assert body["is_manual"] is False
    assert body["items"][0]["qty"] == 12
    assert body["before_tax"] == pytest.approx(24.0)
    assert body["gst"] == pytest.approx(4.32)
    assert body["grand"] == pytest.approx(28.32)

    _dispatch(client, owner["id"], bolt["id"], 1)
    assert client.get(f"/client-costing/{owner['id']}").json()["items"][0]["qty"] == 13


def test_manual_costing_ignores_supplied_totals(test_context):
    client, _ = test_context
    bolt, owner = _setup_bolt_client(client)

    saved = client.put(
        f"/client-costing/{owner['id']}",
        json={
            "items": [
                {
                    "material_id": bolt["id"],
                    "name": "Bolt",
                    "qty": 10,
                    "rate": 2.0,
                    "gst_percent": 18,
                    "total": 5000,
                    "base": 1,
                },
            ]
        },
    )
    assert saved.status_code == 200, saved.text
    assert saved.json()["items"][0]["total"] == pytest.approx(23.6)
    assert saved.json()["grand"] == pytest.approx(23.6)

    negative = client.put(
        f"/client-costing/{owner['id']}",
        json={"items": [{"material_id": bolt["id"], "name": "Bolt", "qty": -1, "rate": 2.0, "gst_percent": 18}]},
    )
    assert negative.status_code == 422


def test_costing_without_transactions_is_computed_not_persisted(test_context):
    client, _ = test_context
    _, owner = _setup_bolt_client(client, dispatched=0)

    body = client.get(f"/client-costing/{owner['id']}").json()
    assert body["persisted"] is False
    assert body["id"] is None
    assert body["items"] == []
    assert body["grand"] == 0


def test_costing_routes_reject_unknown_client(test_context):
    client, _ = test_context

    assert client.get("/client-costing/missing").status_code == 404
    assert client.put("/client-costing/missing", json={"items": []}).status_code == 404
    assert client.post("/client-costing/missing/recompute").status_code == 404
    assert client.get("/client-costing/missing/pdf").status_code == 404


def test_costing_pdf_download(test_context):
    client, _ = test_context
    _, owner = _setup_bolt_client(client)

    res = client.get(f"/client-costing/{owner['id']}/pdf")
    assert res.status_code == 200, res.text
    assert res.headers["content-type"] == "application/pdf"
    assert 'filename="costing-100200300400.pdf"' in res.headers["content-disposition"]
    assert res.content.startswith(b"%PDF-1.4")
    assert b"Ravi Patel" in res.content
    assert b"23.60" in res.content


def test_manual_costing_lines_are_ordered_by_name(test_context):
    client, _ = test_context
    bolt, owner = _setup_bolt_client(client)

    saved = client.put(
        f"/client-costing/{owner['id']}",
        json={
            "items": [
                {"material_id": "labour", "name": "wiring labour", "qty": 1, "rate": 50.0, "gst_percent": 0},
                {"material_id": bolt["id"], "name": "Bolt", "qty": 5, "rate": 2.0, "gst_percent": 18},
                {"material_id": "clamp", "name": "Clamp", "qty": 2, "rate": 1.0, "gst_percent": 0},
            ]
        },
    )
    assert saved.status_code == 200, saved.text
    assert [line["name"] for line in saved.json()["items"]] == ["Bolt", "Clamp", "wiring labour"]
