from decimal import Decimal

import pytest

from billing import (
    LineItem,
    RateTable,
    Totals,
    aggregate,
    compute_line,
    display_amount,
    draft_summary,
    format_inr,
    parse_money,
    split_gst,
)
from errors import InvalidInput, ValidationFailure
from models import CatalogKind


def test_compute_line_applies_gst_to_subtotal():
    """2 x 100 at 18% GST gives 200 + 36 = 236."""
    amounts = compute_line(2, 100, 18)

    assert amounts.item_subtotal == Decimal("200")
    assert amounts.gst_amount == Decimal("36")
    assert amounts.line_total == Decimal("236")


def test_compute_line_accepts_decimal_strings():
    amounts = compute_line("3", "49.99", "5")

    assert amounts.item_subtotal == Decimal("149.97")
    assert display_amount(amounts.gst_amount) == Decimal("7.50")


@pytest.mark.parametrize("quantity", [0, -1, 1.5, "abc", True])
def test_compute_line_rejects_bad_quantity(quantity):
    with pytest.raises(InvalidInput):
        compute_line(quantity, 100, 18)


def test_compute_line_rejects_negative_rate_and_gst():
    with pytest.raises(InvalidInput):
        compute_line(1, -10, 18)
    with pytest.raises(InvalidInput):
        compute_line(1, 10, -1)


def test_aggregate_mixed_gst_rates():
    """(2, 100, 18%), (1, 50, 12%), (5, 20, 0%) -> 350 + 42 = 392."""
    lines = [
        LineItem(1, "Room", 2, 100, 18),
        LineItem(2, "Spa", 1, 50, 12),
        LineItem(3, "Tea", 5, 20, 0),
    ]

    totals = aggregate(lines)

    assert totals.subtotal == Decimal("350")
    assert totals.tax_amount == Decimal("42")
    assert totals.total_amount == Decimal("392")


def test_aggregate_empty_is_zero():
    assert aggregate([]) == Totals(Decimal("0"), Decimal("0"))


def test_totals_keep_full_precision_until_display():
    """Three lines of 0.333 tax must not be rounded one by one."""
    lines = [LineItem(i, "x", 1, "1.11", 30) for i in range(3)]

    totals = aggregate(lines)

    assert totals.tax_amount == Decimal("0.999")
    assert totals.display()["tax_amount"] == Decimal("1.00")


def test_split_gst_halves_add_back_up():
    cgst, sgst = split_gst("42.01")

    assert cgst + sgst == Decimal("42.01")
    assert display_amount(cgst) == Decimal("21.01")


def test_display_amount_rounds_half_up():
    assert display_amount("2.345") == Decimal("2.35")
    assert display_amount("2.344") == Decimal("2.34")
    assert display_amount(None) == Decimal("0.00")


def test_format_inr():
    assert format_inr(1234.5) == "₹1,234.50"
    assert format_inr("-10") == "-₹10.00"


@pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", True])
def test_parse_money_rejects_garbage(value):
    with pytest.raises(ValidationFailure):
        parse_money(value)


def test_line_item_payload_uses_service_id_for_services():
    service = LineItem(7, "Massage", 1, 1500, 18, CatalogKind.SERVICE)
    dish = LineItem(9, "Dosa", 2, 80, 5, CatalogKind.MENU_ITEM)

    assert service.to_payload() == {
        "service_id": 7, "name": "Massage", "quantity": 1, "rate": 1500.0, "gst_percentage": 18.0,
    }
    assert dish.to_payload()["id"] == 9
    assert "service_id" not in dish.to_payload()


def test_line_item_from_upstream_row():
    row = {"service_id": 4, "item_name": "Boating", "quantity": 2, "rate": "250.00", "gst_percentage": "18.00"}

    line = LineItem.from_upstream(row)

    assert line.item_id == 4
    assert line.name == "Boating"
    assert line.line_total == Decimal("590")


CATALOG = [
    {"id": 1, "name": "Room", "price": "100.00", "gst_percentage": "18.00", "is_active": 1},
    {"id": 2, "name": "Spa", "price": 50, "gst_percentage": 12, "is_active": "1"},
    {"id": 3, "name": "Closed pool", "price": 20, "gst_percentage": 0, "is_active": 0},
]


def test_rate_table_snapshots_catalog_price():
    table = RateTable.from_catalog(CATALOG, CatalogKind.SERVICE)

    line = table.snapshot(1, 2)

    assert line.rate == Decimal("100.00")
    assert line.gst_percentage == Decimal("18.00")
    assert line.line_total == Decimal("236")
    assert len(table) == 3
    assert [entry.id for entry in table.active_entries()] == [1, 2]


def test_rate_table_rejects_unknown_and_inactive_items():
    table = RateTable.from_catalog(CATALOG, CatalogKind.SERVICE)

    with pytest.raises(ValidationFailure):
        table.snapshot(99, 1)
    with pytest.raises(ValidationFailure):
        table.snapshot(3, 1)


def test_draft_summary_rounds_for_display():
    table = RateTable.from_catalog(CATALOG, CatalogKind.SERVICE)

    summary = draft_summary([table.snapshot(1, 2), table.snapshot(2, 1)])

    assert summary["subtotal"] == Decimal("250.00")
    assert summary["tax_amount"] == Decimal("42.00")
    assert summary["cgst"] == Decimal("21.00")
    assert summary["total_amount"] == Decimal("292.00")
    assert len(summary["items"]) == 2
