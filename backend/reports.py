"""
Aggregated invoice reports and spreadsheet downloads.
"""
import logging
from datetime import date, datetime
from typing import Iterable, List, Optional

from billing import ZERO, display_amount, parse_money, split_gst
from errors import ValidationFailure
from models import InvoiceType, OrderType, PaymentMethod, PaymentStatus

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def parse_date(value) -> date:
    """Accept a date, a ``yyyy-MM-dd`` string or an ISO-8601 timestamp."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise ValidationFailure("Date is required")
    text = str(value).strip()
    try:
        return datetime.strptime(text[:10], DATE_FORMAT).date()
    except ValueError:
        raise ValidationFailure(f"Invalid date: {value!r}", details={"date": text})


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def as_invoice_type(value) -> InvoiceType:
    try:
        return InvoiceType(value)
    except ValueError:
        raise ValidationFailure(f"Unknown invoice type: {value!r}", details={"type": value})


def matches_guest(guest_name: Optional[str], guest_filter: Optional[str]) -> bool:
    needle = (guest_filter or "").strip().lower()
    if not needle:
        return True
    return needle in (guest_name or "").lower()


def _invoice_type(invoice: dict) -> Optional[str]:
    # aggregated kitchen rows carry order fields but no "type"
    if invoice.get("type"):
        return invoice["type"]
    if invoice.get("order_number") or invoice.get("order_type"):
        return InvoiceType.KITCHEN.value
    return None


def filter_invoices(invoices: Iterable[dict], guest_name: Optional[str], from_date, to_date,
                    invoice_type) -> List[dict]:
    from_date = parse_date(from_date)
    to_date = parse_date(to_date)
    if from_date > to_date:
        raise ValidationFailure(
            "from_date must not be after to_date",
            details={"from_date": format_date(from_date), "to_date": format_date(to_date)},
        )
    invoice_type = as_invoice_type(invoice_type).value

    selected = []
    for invoice in invoices:
        kind = _invoice_type(invoice)
        if kind is not None and kind != invoice_type:
            continue
        if not matches_guest(invoice.get("guest_name"), guest_name):
            continue
        invoice_date = parse_date(invoice.get("invoice_date"))
        if from_date <= invoice_date <= to_date:
            selected.append(invoice)

    selected.sort(key=lambda inv: (parse_date(inv.get("invoice_date")), inv.get("id") or 0))
    return selected


def _display_invoice(invoice: dict) -> dict:
    row = dict(invoice)
    tax_amount = parse_money(invoice.get("tax_amount"))
    cgst, sgst = split_gst(tax_amount)
    row["subtotal"] = display_amount(invoice.get("subtotal"))
    row["tax_amount"] = display_amount(tax_amount)
    row["total_amount"] = display_amount(invoice.get("total_amount"))
    row["cgst"] = display_amount(cgst)
    row["sgst"] = display_amount(sgst)
    items = []
    for item in invoice.get("items") or []:
        item_row = dict(item)
        gst_amount = parse_money(item.get("gst_amount"))
        item_cgst, item_sgst = split_gst(gst_amount)
        item_row["rate"] = display_amount(item.get("rate"))
        item_row["gst_percentage"] = parse_money(item.get("gst_percentage"))
        item_row["gst_amount"] = display_amount(gst_amount)
        item_row["cgst"] = display_amount(item_cgst)
        item_row["sgst"] = display_amount(item_sgst)
        item_row["total"] = display_amount(item.get("total"))
        items.append(item_row)
    row["items"] = items
    return row


def summarize(invoices: List[dict], invoice_type) -> dict:
    total_subtotal = ZERO
    total_tax = ZERO
    total_amount = ZERO
    status_summary = {status.value: 0 for status in PaymentStatus}
    method_summary = {"cash": 0, "card": 0, "upi": 0, "other": 0}
    order_type_summary = {"room": 0, "walk_in": 0}

    for invoice in invoices:
        total_subtotal += parse_money(invoice.get("subtotal"))
        total_tax += parse_money(invoice.get("tax_amount"))
        total_amount += parse_money(invoice.get("total_amount"))

        status = invoice.get("payment_status")
        if status in status_summary:
            status_summary[status] += 1

        method = invoice.get("payment_method")
        if method in (PaymentMethod.CASH.value, PaymentMethod.CARD.value, PaymentMethod.UPI.value):
            method_summary[method] += 1
        else:
            method_summary["other"] += 1

        if invoice.get("order_type"):
            try:
                order_type = OrderType.parse(invoice["order_type"])
            except ValueError:
                logger.warning("Invoice %s has unknown order type %r", invoice.get("id"), invoice["order_type"])
                continue
            if order_type == OrderType.ROOM_SERVICE:
                order_type_summary["room"] += 1
            else:
                order_type_summary["walk_in"] += 1

    summary = {
        "total_invoices": len(invoices),
        "total_subtotal": total_subtotal,
        "total_tax": total_tax,
        "total_amount": total_amount,
        "payment_status_summary": status_summary,
        "payment_method_summary": method_summary,
    }
    if as_invoice_type(invoice_type) == InvoiceType.KITCHEN:
        summary["order_type_summary"] = order_type_summary
    return summary


def compose_aggregated_report(invoices: Iterable[dict], guest_name: Optional[str], from_date, to_date,
                              invoice_type, header: Optional[dict] = None) -> dict:
    """Group a guest's invoices over a date range into one consolidated report.

    The filter is inclusive of both dates. An empty selection still gives a
    complete report with zero totals.
    """
    invoice_type = as_invoice_type(invoice_type)
    selected = filter_invoices(invoices, guest_name, from_date, to_date, invoice_type)
    summary = summarize(selected, invoice_type)
    cgst, sgst = split_gst(summary["total_tax"])

    for key in ("total_subtotal", "total_tax", "total_amount"):
        summary[key] = display_amount(summary[key])
    summary["total_cgst"] = display_amount(cgst)
    summary["total_sgst"] = display_amount(sgst)

    header_key = "kitchen_info" if invoice_type == InvoiceType.KITCHEN else "resort_info"
    return {
        header_key: header or {},
        "date_range": {
            "from_date": format_date(parse_date(from_date)),
            "to_date": format_date(parse_date(to_date)),
        },
        "guest_filter": (guest_name or "").strip(),
        "invoices": [_display_invoice(invoice) for invoice in selected],
        "summary": summary,
    }


# =============================================================================
# SPREADSHEET DOWNLOADS
# =============================================================================

class ReportKind:
    SALES = "sales"
    GST = "gst"
    KITCHEN_ITEMS = "kitchen-items"
    RESORT_DETAILS = "resort-details"


# kind -> (upstream endpoint, download filename, needs date range)
REPORT_DOWNLOADS = {
    ReportKind.SALES: ("/reports/sales/excel", "reportSales.xlsx", True),
    ReportKind.GST: ("/reports/gst/excel", "reportGST.xlsx", True),
    ReportKind.KITCHEN_ITEMS: ("/reports/kitchen-items/excel", "reportKitchen.xlsx", True),
    ReportKind.RESORT_DETAILS: ("/reports/resort-details", "reportResort.xlsx", False),
}

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ReportDownload:
    def __init__(self, filename: str, content: bytes, content_type: str = XLSX_CONTENT_TYPE):
        self.filename = filename
        self.content = content
        self.content_type = content_type

    def __len__(self):
        return len(self.content)


def report_query(start_date=None, end_date=None, report_type: Optional[str] = None) -> dict:
    params = {}
    if start_date is not None:
        params["start_date"] = format_date(parse_date(start_date))
    if end_date is not None:
        params["end_date"] = format_date(parse_date(end_date))
    if report_type and report_type != "all":
        params["type"] = as_invoice_type(report_type).value
    if "start_date" in params and "end_date" in params and params["start_date"] > params["end_date"]:
        raise ValidationFailure("start_date must not be after end_date")
    return params
