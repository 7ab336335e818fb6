from typing import List, Optional

from pydantic import BaseModel, validator

from models import KnownGuest, ManualGuest, OrderType, PaymentMethod, PaymentStatus, Role


class UserLogin(BaseModel):
    username: str
    password: str

    @validator("username")
    def validate_username(cls, v: str) -> str:
        if not v or len(v.strip()) == 0:
            raise ValueError("Username cannot be empty")
        return v.strip()

    @validator("password")
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password cannot be empty")
        return v


class UserResponse(BaseModel):
    id: Optional[int] = None
    username: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
    capabilities: dict


class UserCreate(BaseModel):
    username: str
    password: str
    full_name: str
    email: Optional[str] = None
    role: str = Role.RECEPTION.value

    @validator("username")
    def validate_username(cls, v: str) -> str:
        if not v or len(v.strip()) == 0:
            raise ValueError("Username cannot be empty")
        if len(v) < 3:
            raise ValueError("Username must be at least 3 characters")
        if len(v) > 50:
            raise ValueError("Username cannot exceed 50 characters")
        return v.strip()

    @validator("password")
    def validate_password(cls, v: str) -> str:
        if not v or len(v) == 0:
            raise ValueError("Password cannot be empty")
        if len(v) < 4:
            raise ValueError("Password must be at least 4 characters")
        return v

    @validator("role")
    def validate_role(cls, v: str) -> str:
        if v not in [role.value for role in Role]:
            raise ValueError("Role must be one of 'admin', 'reception' or 'kitchen'")
        return v


class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None

    @validator("role")
    def validate_role(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in [role.value for role in Role]:
            raise ValueError("Role must be one of 'admin', 'reception' or 'kitchen'")
        return v


class PasswordChange(BaseModel):
    password: str

    @validator("password")
    def validate_password(cls, v: str) -> str:
        if not v or len(v) == 0:
            raise ValueError("Password cannot be empty")
        if len(v) < 4:
            raise ValueError("Password must be at least 4 characters")
        return v


class CatalogItemCreate(BaseModel):
    name: str
    description: str = ""
    price: float
    gst_percentage: float = 0
    is_active: bool = True

    @validator("name")
    def validate_name(cls, v: str) -> str:
        if not v or len(v.strip()) == 0:
            raise ValueError("Name cannot be empty")
        if len(v) > 100:
            raise ValueError("Name cannot exceed 100 characters")
        return v.strip()

    @validator("price")
    def validate_price(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Price cannot be negative")
        if v > 1000000:
            raise ValueError("Price is too high")
        return v

    @validator("gst_percentage")
    def validate_gst(cls, v: float) -> float:
        if v < 0 or v > 100:
            raise ValueError("GST percentage must be between 0 and 100")
        return v

    def to_payload(self) -> dict:
        payload = self.dict()
        payload["is_active"] = 1 if self.is_active else 0
        return payload


class ServiceCreate(CatalogItemCreate):
    pass


class MenuItemCreate(CatalogItemCreate):
    type: str

    @validator("type")
    def validate_type(cls, v: str) -> str:
        if not v or len(v.strip()) == 0:
            raise ValueError("Menu item type cannot be empty")
        return v.strip()


class GuestCreate(BaseModel):
    name: str
    mobile: str
    email: Optional[str] = None
    room_number: str
    check_in_date: Optional[str] = None
    check_out_date: Optional[str] = None
    company_name: Optional[str] = None
    gst_number: Optional[str] = None

    @validator("name", "mobile", "room_number")
    def validate_required(cls, v: str) -> str:
        if not v or len(v.strip()) == 0:
            raise ValueError("Field cannot be empty")
        return v.strip()


class GuestDetails(BaseModel):
    name: str
    mobile: str = ""
    room_number: str = ""
    company_name: str = ""
    gst_number: str = ""


class DraftItem(BaseModel):
    item_id: int
    quantity: int = 1

    @validator("quantity")
    def validate_quantity(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Quantity must be greater than 0")
        return v


class GuestSelectionMixin(BaseModel):
    guest_id: Optional[int] = None
    guest: Optional[GuestDetails] = None

    def guest_selection(self):
        if self.guest_id is not None:
            return KnownGuest(self.guest_id)
        if self.guest is not None:
            return ManualGuest(**self.guest.dict())
        return None


class InvoiceDraft(GuestSelectionMixin):
    items: List[DraftItem]

    @validator("items")
    def validate_items(cls, v: List[DraftItem]) -> List[DraftItem]:
        if not v:
            raise ValueError("Add at least one item")
        return v


class InvoiceCreate(InvoiceDraft):
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: str = ""
    booking_date: Optional[str] = None
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None


class KitchenOrderCreate(InvoiceDraft):
    order_type: str = OrderType.ROOM_SERVICE.value

    @validator("order_type")
    def validate_order_type(cls, v: str) -> str:
        try:
            return OrderType.parse(v).value
        except ValueError:
            raise ValueError("Order type must be 'room_service' or 'walk_in'")


class OrderStatusUpdate(BaseModel):
    status: Optional[str] = None
    action: Optional[str] = None


class CreateInvoiceFromOrder(BaseModel):
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.CASH


class PaymentUpdate(BaseModel):
    payment_status: Optional[str] = None
    payment_method: Optional[str] = None


class CheckoutUpdate(BaseModel):
    check_out_time: str


class AggregatedEmail(BaseModel):
    email_to: str

    @validator("email_to")
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not v or "@" not in v:
            raise ValueError("Please enter a valid email")
        return v
