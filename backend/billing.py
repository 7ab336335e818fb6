"""
Invoice and kitchen order arithmetic.

All sums are kept as full-precision ``Decimal`` values. Amounts are only
rounded to paise by ``display_amount`` when they are shown or returned to a
browser, so long bills never accumulate rounding error.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Tuple

from errors import InvalidInput, ValidationFailure
from models import CatalogEntry, CatalogKind

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def parse_money(value) -> Decimal:
    """Normalise an upstream amount (number or decimal string) to ``Decimal``."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, bool):
        raise ValidationFailure(f"Invalid amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValidationFailure(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValidationFailure(f"Invalid amount: {value!r}")
    return amount


def display_amount(value) -> Decimal:
    return parse_money(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_inr(value) -> str:
    amount = display_amount(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}₹{abs(amount):,.2f}"


def _check_quantity(quantity) -> int:
    if isinstance(quantity, bool):
        raise InvalidInput("Quantity must be a whole number")
    if isinstance(quantity, str):
        try:
            quantity = int(quantity.strip())
        except ValueError:
            raise InvalidInput(f"Quantity must be a whole number, got {quantity!r}")
    elif not isinstance(quantity, int):
        try:
            whole = int(quantity)
        except (TypeError, ValueError, OverflowError):
            raise InvalidInput(f"Quantity must be a whole number, got {quantity!r}")
        if whole != quantity:
            raise InvalidInput(f"Quantity must be a whole number, got {quantity!r}")
        quantity = whole
    if quantity <= 0:
        raise InvalidInput("Quantity must be greater than 0", details={"quantity": quantity})
    return quantity


def _check_non_negative(value, field: str) -> Decimal:
    try:
        amount = parse_money(value)
    except ValidationFailure:
        raise InvalidInput(f"{field} must be a number, got {value!r}")
    if amount < 0:
        raise InvalidInput(f"{field} cannot be negative", details={field: str(amount)})
    return amount


class LineAmounts:
    def __init__(self, item_subtotal: Decimal, gst_amount: Decimal, line_total: Decimal):
        self.item_subtotal = item_subtotal
        self.gst_amount = gst_amount
        self.line_total = line_total

    def __eq__(self, other):
        return isinstance(other, LineAmounts) and (
            (self.item_subtotal, self.gst_amount, self.line_total)
            == (other.item_subtotal, other.gst_amount, other.line_total)
        )

    def __repr__(self):
        return (f"LineAmounts(item_subtotal={self.item_subtotal}, "
                f"gst_amount={self.gst_amount}, line_total={self.line_total})")


def compute_line(quantity, rate, gst_percentage) -> LineAmounts:
    quantity = _check_quantity(quantity)
    rate = _check_non_negative(rate, "rate")
    gst_percentage = _check_non_negative(gst_percentage, "gst_percentage")

    item_subtotal = quantity * rate
    gst_amount = item_subtotal * gst_percentage / HUNDRED
    return LineAmounts(item_subtotal, gst_amount, item_subtotal + gst_amount)


def split_gst(tax_amount) -> Tuple[Decimal, Decimal]:
    """Split a combined GST figure into (CGST, SGST) for display."""
    tax_amount = parse_money(tax_amount)
    cgst = tax_amount / 2
    return cgst, tax_amount - cgst


class LineItem:
    """One invoice or order row with rate and GST copied from the catalog."""

    def __init__(self, item_id: Optional[int], name: str, quantity, rate, gst_percentage,
                 kind: CatalogKind = CatalogKind.SERVICE):
        self.amounts = compute_line(quantity, rate, gst_percentage)
        self.item_id = item_id
        self.name = name
        self.quantity = _check_quantity(quantity)
        self.rate = parse_money(rate)
        self.gst_percentage = parse_money(gst_percentage)
        self.kind = kind

    @property
    def item_subtotal(self) -> Decimal:
        return self.amounts.item_subtotal

    @property
    def gst_amount(self) -> Decimal:
        return self.amounts.gst_amount

    @property
    def line_total(self) -> Decimal:
        return self.amounts.line_total

    @classmethod
    def from_upstream(cls, row: dict, kind: CatalogKind = CatalogKind.SERVICE) -> "LineItem":
        item_id = row.get("service_id") or row.get("item_id") or row.get("id")
        name = row.get("item_name") or row.get("name") or ""
        return cls(item_id, name, row.get("quantity"), row.get("rate"), row.get("gst_percentage"), kind)

    def to_payload(self) -> dict:
        id_field = "service_id" if self.kind == CatalogKind.SERVICE else "id"
        return {
            id_field: self.item_id,
            "name": self.name,
            "quantity": self.quantity,
            "rate": float(self.rate),
            "gst_percentage": float(self.gst_percentage),
        }

    def display(self) -> dict:
        cgst, sgst = split_gst(self.gst_amount)
        return {
            "item_id": self.item_id,
            "name": self.name,
            "quantity": self.quantity,
            "rate": display_amount(self.rate),
            "gst_percentage": self.gst_percentage,
            "item_subtotal": display_amount(self.item_subtotal),
            "gst_amount": display_amount(self.gst_amount),
            "cgst": display_amount(cgst),
            "sgst": display_amount(sgst),
            "total": display_amount(self.line_total),
        }

    def __repr__(self):
        return f"LineItem({self.name!r}, qty={self.quantity}, rate={self.rate}, gst={self.gst_percentage}%)"


class Totals:
    def __init__(self, subtotal: Decimal, tax_amount: Decimal):
        self.subtotal = subtotal
        self.tax_amount = tax_amount
        self.total_amount = subtotal + tax_amount

    def gst_breakdown(self) -> Dict[str, Decimal]:
        cgst, sgst = split_gst(self.tax_amount)
        return {"cgst": cgst, "sgst": sgst}

    def display(self) -> dict:
        breakdown = self.gst_breakdown()
        return {
            "subtotal": display_amount(self.subtotal),
            "tax_amount": display_amount(self.tax_amount),
            "cgst": display_amount(breakdown["cgst"]),
            "sgst": display_amount(breakdown["sgst"]),
            "total_amount": display_amount(self.total_amount),
        }

    def __eq__(self, other):
        return isinstance(other, Totals) and (
            (self.subtotal, self.tax_amount, self.total_amount)
            == (other.subtotal, other.tax_amount, other.total_amount)
        )

    def __repr__(self):
        return f"Totals(subtotal={self.subtotal}, tax_amount={self.tax_amount}, total_amount={self.total_amount})"


def aggregate(items: Iterable) -> Totals:
    """Sum line items (``LineItem`` or ``LineAmounts``) into invoice totals."""
    subtotal = ZERO
    tax_amount = ZERO
    for item in items:
        subtotal += item.item_subtotal
        tax_amount += item.gst_amount
    return Totals(subtotal, tax_amount)


def draft_summary(items: List[LineItem]) -> dict:
    summary = aggregate(items).display()
    summary["items"] = [item.display() for item in items]
    return summary


class RateTable:
    """Price list used to snapshot catalog entries into new line items."""

    def __init__(self, entries: Iterable[CatalogEntry]):
        self._entries = {entry.id: entry for entry in entries}

    @classmethod
    def from_catalog(cls, rows: Iterable[dict], kind: CatalogKind) -> "RateTable":
        entries = []
        for row in rows:
            entries.append(CatalogEntry(
                id=int(row["id"]),
                name=row.get("name") or "",
                price=parse_money(row.get("price")),
                gst_percentage=parse_money(row.get("gst_percentage")),
                # upstream sends 1/0, older rows true/false
                is_active=row.get("is_active", 1) in (1, "1"),
                kind=kind,
                category=row.get("type"),
            ))
        return cls(entries)

    def active_entries(self) -> List[CatalogEntry]:
        return [entry for entry in self._entries.values() if entry.is_active]

    def lookup(self, entry_id: int) -> CatalogEntry:
        entry = self._entries.get(entry_id)
        if entry is None:
            raise ValidationFailure(f"Item {entry_id} not found in catalog", details={"item_id": entry_id})
        if not entry.is_active:
            raise ValidationFailure(f"Item '{entry.name}' is not active", details={"item_id": entry_id})
        return entry

    def snapshot(self, entry_id: int, quantity) -> LineItem:
        entry = self.lookup(entry_id)
        return LineItem(entry.id, entry.name, quantity, entry.price, entry.gst_percentage, entry.kind)

    def __len__(self):
        return len(self._entries)
