from decimal import Decimal
from types import SimpleNamespace

import pytest

from matcount.core.money import format_money, to_money
from matcount.models.material import Material
from matcount.services.costing_service import compute_costing, costing_from_lines, price_line
from matcount.services.pdf_export_service import build_text_pdf, paginate
from matcount.services.usage_service import compute_usage, net_quantity_totals


def _txn(direction: str, material_id: str, quantity: int, name: str = "") -> SimpleNamespace:
    return SimpleNamespace(
        direction=direction,
        items=[{"material_id": material_id, "material_name": name or material_id.title(), "quantity": quantity}],
    )


def _material(material_id: str, name: str, unit_price: float | None, gst_percent: float | None) -> Material:
    return Material(
        id=material_id,
        name=name,
        description="",
        category="Hardware",
        quantity=0,
        unit_price=unit_price,
        gst_percent=gst_percent,
    )


def test_compute_usage_sums_out_and_in_per_material():
    usage = compute_usage(
        [
            _txn("out", "bolt", 10),
            _txn("out", "bolt", 5),
            _txn("in", "bolt", 3),
            _txn("out", "cable", 7),
        ]
    )

    assert usage["bolt"].out_qty == 15
    assert usage["bolt"].in_qty == 3
    assert usage["bolt"].net_qty == 12
    assert usage["cable"].net_qty == 7


def test_compute_usage_is_order_independent():
    transactions = [
        _txn("out", "bolt", 10),
        _txn("in", "bolt", 4),
        _txn("out", "panel", 2),
        _txn("out", "bolt", 1),
    ]

    forward = compute_usage(transactions)
    backward = compute_usage(list(reversed(transactions)))

    assert {k: (v.out_qty, v.in_qty, v.net_qty) for k, v in forward.items()} == {
        k: (v.out_qty, v.in_qty, v.net_qty) for k, v in backward.items()
    }


def test_compute_usage_clamps_net_at_zero_and_skips_unknown_directions():
    usage = compute_usage(
        [
            _txn("out", "bolt", 2),
            _txn("in", "bolt", 5),
            _txn("sideways", "bolt", 100),
            SimpleNamespace(direction="out", items=[{"material_id": "", "quantity": 9}]),
        ]
    )

    assert list(usage) == ["bolt"]
    assert usage["bolt"].out_qty == 2
    assert usage["bolt"].in_qty == 5
    assert usage["bolt"].net_qty == 0


def test_net_quantity_totals():
    usage = compute_usage([_txn("out", "a", 10), _txn("in", "a", 4), _txn("out", "b", 3)])
    assert net_quantity_totals(usage) == (13, 4, 9)
    assert net_quantity_totals({}) == (0, 0, 0)


def test_price_line_matches_bolt_example():
    priced = price_line(qty=10, rate=2.0, gst_percent=18)
    assert priced.base == pytest.approx(20.0)
    assert priced.gst == pytest.approx(3.6)
    assert priced.total == pytest.approx(23.6)


def test_compute_costing_prices_net_usage_sorted_by_name():
    usage = compute_usage(
        [
            _txn("out", "w", 4, "washer"),
            _txn("out", "b", 10, "Bolt"),
            _txn("out", "n", 3, "Nut"),
            _txn("in", "n", 3, "Nut"),
        ]
    )
    materials = [
        _material("b", "Bolt", 2.0, 18),
        _material("w", "washer", 0.5, 5),
        _material("n", "Nut", 1.0, 18),
    ]

    result = compute_costing(usage, materials)

    assert [line.name for line in result.items] == ["Bolt", "washer"]
    bolt = result.items[0]
    assert (bolt.qty, bolt.rate, bolt.gst_percent) == (10, 2.0, 18)
    assert bolt.total == pytest.approx(23.6)
    assert result.before_tax == pytest.approx(22.0)
    assert result.gst == pytest.approx(3.7)
    assert result.grand == pytest.approx(sum(line.total for line in result.items), abs=1e-6)
    for line in result.items:
        assert line.total == pytest.approx(line.base + line.gst, abs=1e-6)
        assert line.gst == pytest.approx(line.base * line.gst_percent / 100, abs=1e-6)


def test_compute_costing_falls_back_to_material_name_and_zero_price():
    usage = compute_usage([_txn("out", "old-id", 5, "Cable"), _txn("out", "gone", 2, "Ghost")])
    materials = [_material("new-id", "cable", 3.0, 12)]

    result = compute_costing(usage, materials)

    by_name = {line.name: line for line in result.items}
    assert by_name["Cable"].rate == 3.0
    assert by_name["Cable"].material_id == "old-id"
    assert by_name["Ghost"].rate == 0.0
    assert by_name["Ghost"].total == 0.0


def test_compute_costing_is_idempotent():
    usage = compute_usage([_txn("out", "b", 7, "Bolt")])
    materials = [_material("b", "Bolt", 1.15, 18)]
    assert compute_costing(usage, materials) == compute_costing(usage, materials)


def test_costing_from_lines_rederives_amounts():
    lines = [
        SimpleNamespace(material_id="b", name="Bolt", qty=10, rate=2.0, gst_percent=18, total=999.0),
        SimpleNamespace(material_id="a", name="anchor", qty=1, rate=5.0, gst_percent=0, total=-1.0),
    ]

    result = costing_from_lines(lines)

    assert [line.name for line in result.items] == ["anchor", "Bolt"]
    assert result.items[1].total == pytest.approx(23.6)
    assert result.grand == pytest.approx(28.6)


def test_money_helpers_round_half_up_only_for_display():
    assert to_money(2.005) == Decimal("2.01")
    assert format_money(1234.5) == "1,234.50"
    assert format_money(None) == "0.00"


def test_build_text_pdf_paginates_long_reports():
    lines = [f"Line {i}" for i in range(120)]

    pdf = build_text_pdf(title="Material Costing", lines=lines, lines_per_page=50)

    assert pdf.startswith(b"%PDF-1.4")
    assert pdf.rstrip().endswith(b"%%EOF")
    assert b"/Count 3" in pdf
    assert b"(Line 119) Tj" in pdf
    assert b"(Page 3 of 3) Tj" in pdf


def test_paginate_always_returns_at_least_one_page():
    assert paginate([], lines_per_page=10) == [[]]
    assert paginate(["a", "b", "c"], lines_per_page=2) == [["a", "b"], ["c"]]
