from datetime import date
from decimal import Decimal

import pytest

from errors import ValidationFailure
from reports import compose_aggregated_report, filter_invoices, matches_guest, parse_date, report_query


RESORT_INVOICES = [
    {
        "id": 3, "type": "resort", "guest_name": "Anita Rao", "invoice_date": "2024-03-12T10:15:00.000Z",
        "subtotal": "1000.00", "tax_amount": "180.00", "total_amount": "1180.00",
        "payment_status": "paid", "payment_method": "upi",
        "items": [{"item_name": "Room", "quantity": 1, "rate": "1000.00", "gst_percentage": "18.00",
                   "gst_amount": "180.00", "total": "1180.00"}],
    },
    {
        "id": 1, "type": "resort", "guest_name": "anita rao", "invoice_date": "2024-03-10",
        "subtotal": "500.00", "tax_amount": "60.00", "total_amount": "560.00",
        "payment_status": "pending", "payment_method": "bank_transfer", "items": [],
    },
    {
        "id": 2, "type": "resort", "guest_name": "Vikram", "invoice_date": "2024-03-11",
        "subtotal": "200.00", "tax_amount": "0.00", "total_amount": "200.00",
        "payment_status": "paid", "payment_method": "cash", "items": [],
    },
    {
        "id": 4, "type": "kitchen", "guest_name": "Anita Rao", "invoice_date": "2024-03-11",
        "subtotal": "100.00", "tax_amount": "5.00", "total_amount": "105.00",
        "payment_status": "paid", "payment_method": "cash", "order_type": "room_service", "items": [],
    },
    {
        "id": 5, "type": "resort", "guest_name": "Anita Rao", "invoice_date": "2024-03-20",
        "subtotal": "999.00", "tax_amount": "0.00", "total_amount": "999.00",
        "payment_status": "paid", "payment_method": "cash", "items": [],
    },
]


def test_matches_guest_is_case_insensitive_substring():
    assert matches_guest("Anita Rao", "anita")
    assert matches_guest("Anita Rao", "  RAO ")
    assert not matches_guest("Vikram", "anita")
    assert matches_guest("Vikram", "")
    assert matches_guest(None, None)


def test_parse_date_accepts_iso_timestamps():
    assert parse_date("2024-03-12T10:15:00.000Z") == date(2024, 3, 12)
    assert parse_date(date(2024, 1, 1)) == date(2024, 1, 1)
    with pytest.raises(ValidationFailure):
        parse_date("12/03/2024")


def test_filter_invoices_by_guest_type_and_inclusive_range():
    selected = filter_invoices(RESORT_INVOICES, "anita", "2024-03-10", "2024-03-12", "resort")

    assert [inv["id"] for inv in selected] == [1, 3]


def test_filter_invoices_rejects_inverted_range():
    with pytest.raises(ValidationFailure):
        filter_invoices(RESORT_INVOICES, "anita", "2024-03-12", "2024-03-10", "resort")


def test_aggregated_report_totals_and_breakdowns():
    report = compose_aggregated_report(RESORT_INVOICES, "Anita", "2024-03-10", "2024-03-12", "resort",
                                       header={"resort_name": "Green Valley"})

    summary = report["summary"]
    assert report["resort_info"] == {"resort_name": "Green Valley"}
    assert report["date_range"] == {"from_date": "2024-03-10", "to_date": "2024-03-12"}
    assert report["guest_filter"] == "Anita"
    assert summary["total_invoices"] == 2
    assert summary["total_subtotal"] == Decimal("1500.00")
    assert summary["total_tax"] == Decimal("240.00")
    assert summary["total_amount"] == Decimal("1740.00")
    assert summary["total_cgst"] == Decimal("120.00")
    assert summary["total_sgst"] == Decimal("120.00")
    assert summary["payment_status_summary"] == {"pending": 1, "paid": 1, "cancelled": 0}
    assert summary["payment_method_summary"] == {"cash": 0, "card": 0, "upi": 1, "other": 1}
    assert "order_type_summary" not in summary


def test_aggregated_report_splits_item_gst():
    report = compose_aggregated_report(RESORT_INVOICES, "Anita", "2024-03-12", "2024-03-12", "resort")

    invoice = report["invoices"][0]
    assert invoice["cgst"] == Decimal("90.00")
    assert invoice["items"][0]["sgst"] == Decimal("90.00")


def test_kitchen_report_counts_order_types():
    report = compose_aggregated_report(RESORT_INVOICES, "anita", "2024-03-01", "2024-03-31", "kitchen")

    assert "kitchen_info" in report
    assert report["summary"]["total_invoices"] == 1
    assert report["summary"]["order_type_summary"] == {"room": 1, "walk_in": 0}


def test_empty_report_has_zero_totals():
    report = compose_aggregated_report([], "nobody", "2024-03-01", "2024-03-31", "resort")

    summary = report["summary"]
    assert report["invoices"] == []
    assert summary["total_invoices"] == 0
    assert summary["total_amount"] == Decimal("0.00")
    assert summary["total_cgst"] == Decimal("0.00")


def test_unknown_invoice_type_is_validation_failure():
    with pytest.raises(ValidationFailure):
        compose_aggregated_report([], "x", "2024-03-01", "2024-03-31", "bar")


def test_report_query():
    assert report_query(date(2024, 1, 1), "2024-01-31", "all") == {
        "start_date": "2024-01-01", "end_date": "2024-01-31",
    }
    assert report_query("2024-01-01", "2024-01-31", "kitchen")["type"] == "kitchen"
    with pytest.raises(ValidationFailure):
        report_query("2024-02-01", "2024-01-01")
