# models.py
from decimal import Decimal
from enum import Enum
from typing import Optional

from errors import ValidationFailure


class Role(str, Enum):
    ADMIN = "admin"
    RECEPTION = "reception"
    KITCHEN = "kitchen"


class InvoiceType(str, Enum):
    RESORT = "resort"
    KITCHEN = "kitchen"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    BANK_TRANSFER = "bank_transfer"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderType(str, Enum):
    ROOM_SERVICE = "room_service"
    WALK_IN = "walk_in"

    @classmethod
    def parse(cls, value: str) -> "OrderType":
        # older orders were stored as plain "room"
        if value == "room":
            return cls.ROOM_SERVICE
        return cls(value)


class CatalogKind(str, Enum):
    SERVICE = "service"
    MENU_ITEM = "menu_item"


class CatalogEntry:
    """Priced catalog row (resort service or kitchen menu item)."""

    def __init__(self, id: int, name: str, price: Decimal, gst_percentage: Decimal,
                 is_active: bool = True, kind: CatalogKind = CatalogKind.SERVICE,
                 category: Optional[str] = None):
        self.id = id
        self.name = name
        self.price = price
        self.gst_percentage = gst_percentage
        self.is_active = is_active
        self.kind = kind
        self.category = category

    def __repr__(self):
        return f"CatalogEntry(id={self.id}, name={self.name!r}, price={self.price}, gst={self.gst_percentage})"


class KnownGuest:
    """Invoice billed to a registered guest."""

    def __init__(self, guest_id: int):
        self.guest_id = guest_id

    def __eq__(self, other):
        return isinstance(other, KnownGuest) and other.guest_id == self.guest_id

    def __repr__(self):
        return f"KnownGuest({self.guest_id})"


class ManualGuest:
    """Walk-in guest whose details are typed in at billing time."""

    def __init__(self, name: str, mobile: str = "", room_number: str = "",
                 company_name: str = "", gst_number: str = ""):
        self.name = name
        self.mobile = mobile
        self.room_number = room_number
        self.company_name = company_name
        self.gst_number = gst_number

    def __eq__(self, other):
        return isinstance(other, ManualGuest) and vars(other) == vars(self)

    def __repr__(self):
        return f"ManualGuest({self.name!r})"


def resolve_guest(selection, guests) -> dict:
    """Return the guest fields an invoice or order carries for this selection.

    ``guests`` is the guest list as returned upstream. A known guest that is
    not in the list is a validation failure; a manual guest always yields
    ``guest_id = None``.
    """
    if isinstance(selection, KnownGuest):
        for guest in guests:
            if int(guest.get("id")) == selection.guest_id:
                return {
                    "guest_id": selection.guest_id,
                    "guest_name": guest.get("name") or "",
                    "guest_mobile": guest.get("mobile") or "",
                    "room_number": guest.get("room_number") or "",
                    "company_name": guest.get("company_name") or "",
                    "gst_number": guest.get("gst_number") or "",
                }
        raise ValidationFailure(f"Guest {selection.guest_id} not found", details={"guest_id": selection.guest_id})

    if isinstance(selection, ManualGuest):
        if not selection.name or not selection.name.strip():
            raise ValidationFailure("Guest name is required")
        return {
            "guest_id": None,
            "guest_name": selection.name.strip(),
            "guest_mobile": selection.mobile,
            "room_number": selection.room_number,
            "company_name": selection.company_name,
            "gst_number": selection.gst_number,
        }

    raise ValidationFailure("Unknown guest selection")
