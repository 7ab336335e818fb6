from fastapi import FastAPI, Depends, HTTPException, Header, Request, Form, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from typing import List, Optional
from datetime import date
import logging
import os
import uvicorn

import lifecycle
from api_client import ResortApiClient
from auth import ConsoleSession
from billing import LineItem, RateTable, aggregate, display_amount, draft_summary, split_gst
from errors import ConsoleError, InvalidInput, NotAuthenticated, ValidationFailure
from models import CatalogKind, InvoiceType, resolve_guest
from redis_client import redis_client, rate_limit
from reports import REPORT_DOWNLOADS, compose_aggregated_report
from schemas import (
    UserLogin,
    UserResponse,
    LoginResponse,
    UserCreate,
    UserUpdate,
    PasswordChange,
    ServiceCreate,
    MenuItemCreate,
    GuestCreate,
    InvoiceDraft,
    InvoiceCreate,
    KitchenOrderCreate,
    OrderStatusUpdate,
    CreateInvoiceFromOrder,
    PaymentUpdate,
    CheckoutUpdate,
    AggregatedEmail,
)
from upstream import client_for, get_anonymous_client, wait_for_upstream

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("console")


app = FastAPI(title="Resort Back-Office Console")


origins = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost,http://localhost:3000,http://127.0.0.1:3000,http://localhost:8080",
    ).split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

LOGIN_RATE_LIMIT = int(os.getenv("LOGIN_RATE_LIMIT", "10"))


@app.on_event("startup")
def startup_event():
    if not wait_for_upstream():
        logger.warning("Starting without a reachable resort API")

    if redis_client.is_available():
        logger.info("Redis available, caching enabled")
    else:
        logger.warning("Redis unavailable, caching disabled")


@app.exception_handler(ConsoleError)
async def console_error_handler(request: Request, exc: ConsoleError):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code.value, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def get_current_session(authorization: Optional[str] = Header(None)) -> ConsoleSession:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")

    token = authorization.replace("Bearer ", "")
    try:
        session = ConsoleSession.from_token(token)
    except NotAuthenticated:
        raise HTTPException(status_code=401, detail="Invalid token")

    if redis_client.is_session_revoked(session.session_id):
        raise HTTPException(status_code=401, detail="Session has ended")

    return session


def get_api_client(session: ConsoleSession = Depends(get_current_session)):
    client = client_for(session)
    try:
        yield client
    finally:
        client.close()


# ========== Helpers ==========

def load_services(client: ResortApiClient) -> list:
    cached = redis_client.get_cached_services()
    if cached is not None:
        return cached
    services = client.get_services() or []
    redis_client.cache_services(services)
    return services


def load_menu_items(client: ResortApiClient, item_type: Optional[str] = None) -> list:
    cached = redis_client.get_cached_menu_items(item_type)
    if cached is not None:
        return cached
    items = client.get_menu_items(item_type) or []
    redis_client.cache_menu_items(items, item_type)
    return items


def load_guests(client: ResortApiClient, search: Optional[str] = None) -> list:
    cached = redis_client.get_cached_guests(search)
    if cached is not None:
        return cached
    guests = client.get_guests(search) or []
    redis_client.cache_guests(guests, search)
    return guests


def snapshot_items(rate_table: RateTable, items) -> List[LineItem]:
    return [rate_table.snapshot(item.item_id, item.quantity) for item in items]


def guest_fields(client: ResortApiClient, draft) -> dict:
    selection = draft.guest_selection()
    if selection is None:
        raise ValidationFailure("Select a guest or enter guest details")
    guests = load_guests(client) if draft.guest_id is not None else []
    return resolve_guest(selection, guests)


def display_document(document: dict, kind: CatalogKind) -> dict:
    """Invoice or order as shown to staff, with GST split and a totals check."""
    row = dict(document)
    tax_amount = display_amount(document.get("tax_amount"))
    cgst, sgst = split_gst(document.get("tax_amount"))
    row["subtotal"] = display_amount(document.get("subtotal"))
    row["tax_amount"] = tax_amount
    row["total_amount"] = display_amount(document.get("total_amount"))
    row["cgst"] = display_amount(cgst)
    row["sgst"] = display_amount(sgst)

    raw_items = document.get("items") or []
    try:
        lines = [LineItem.from_upstream(item, kind) for item in raw_items]
    except InvalidInput as e:
        logger.warning("Document %s has an invalid line: %s", document.get("id"), e.message)
        row["totals_consistent"] = False
        return row

    totals = aggregate(lines).display()
    row["items"] = [dict(raw, **line.display()) for raw, line in zip(raw_items, lines)]
    row["totals_consistent"] = (
        totals["subtotal"] == row["subtotal"]
        and totals["tax_amount"] == row["tax_amount"]
        and totals["total_amount"] == row["total_amount"]
    )
    return row


def hide_amounts(data):
    if isinstance(data, list):
        return [hide_amounts(row) for row in data]
    if isinstance(data, dict):
        return {
            key: hide_amounts(value)
            for key, value in data.items()
            if key not in ("total", "total_amount", "subtotal", "tax_amount")
        }
    return data


# ========== Service ==========

@app.get("/")
def read_root():
    return {"message": "Resort console is working!"}


@app.get("/health")
def health_check():
    return {"status": "ok", "message": "Console is running"}


@app.get("/cache/info")
def get_cache_info(session: ConsoleSession = Depends(get_current_session)):
    session.require("can_manage_settings")
    return redis_client.get_cache_info()


# ========== Auth ==========

@app.post("/login", response_model=LoginResponse)
@rate_limit(max_requests=LOGIN_RATE_LIMIT, window=60, key_prefix="login")
def login(request: Request, credentials: UserLogin,
          client: ResortApiClient = Depends(get_anonymous_client)):
    logger.info("Login attempt: %s", credentials.username)
    data = client.login(credentials.username, credentials.password)

    session = ConsoleSession().login(data.get("token"), data.get("user") or {})

    return {
        "access_token": session.issue_token(),
        "token_type": "bearer",
        "user": session.user,
        "capabilities": session.capabilities.as_dict(),
    }


@app.post("/logout")
def logout(session: ConsoleSession = Depends(get_current_session)):
    redis_client.revoke_session(session.session_id, session.expires_at)
    username = session.user.get("username")
    session.logout()
    return {"message": f"User {username} logged out"}


@app.get("/me")
def get_current_user_info(session: ConsoleSession = Depends(get_current_session)):
    return {"user": UserResponse(**session.user), "capabilities": session.capabilities.as_dict()}


# ========== Users ==========

@app.get("/users", response_model=List[UserResponse])
def get_users(session: ConsoleSession = Depends(get_current_session),
              client: ResortApiClient = Depends(get_api_client)):
    session.require("can_manage_users", "Only administrators can view users")
    return client.get_users()


@app.post("/users")
def create_user(user: UserCreate, session: ConsoleSession = Depends(get_current_session),
                client: ResortApiClient = Depends(get_api_client)):
    session.require("can_manage_users", "Only administrators can create users")
    return client.create_user(user.dict())


@app.put("/users/{user_id}")
def update_user(user_id: int, user: UserUpdate, session: ConsoleSession = Depends(get_current_session),
                client: ResortApiClient = Depends(get_api_client)):
    session.require("can_manage_users", "Only administrators can update users")
    payload = {key: value for key, value in user.dict().items() if value is not None}
    if not payload:
        raise ValidationFailure("Nothing to update")
    return client.update_user(user_id, payload)


@app.put("/users/{user_id}/password")
def change_password(user_id: int, password_data: PasswordChange,
                    session: ConsoleSession = Depends(get_current_session),
                    client: ResortApiClient = Depends(get_api_client)):
    if session.user.get("id") != user_id:
        session.require("can_manage_users", "You can only change your own password")
    client.update_user_password(user_id, password_data.password)
    return {"message": "Password updated successfully"}


@app.delete("/users/{user_id}")
def delete_user(user_id: int, session: ConsoleSession = Depends(get_current_session),
                client: ResortApiClient = Depends(get_api_client)):
    session.require("can_manage_users", "Only administrators can delete users")
    if user_id == session.user.get("id"):
        raise ValidationFailure("Cannot delete your own account")
    client.delete_user(user_id)
    return {"message": "User deleted successfully"}


# ========== Settings ==========

@app.get("/settings")
def get_settings(client: ResortApiClient = Depends(get_api_client)):
    return client.get_settings()


@app.put("/settings")
async def update_settings(
    resort_name: str = Form(...),
    resort_gstin: str = Form(""),
    kitchen_gstin: str = Form(""),
    resort_address: str = Form(""),
    resort_contact: str = Form(""),
    resort_email: str = Form(""),
    tax_rate: float = Form(0),
    logo: Optional[UploadFile] = File(None),
    session: ConsoleSession = Depends(get_current_session),
    client: ResortApiClient = Depends(get_api_client),
):
    session.require("can_manage_settings", "Only administrators can update settings")
    if tax_rate < 0:
        raise ValidationFailure("Tax rate cannot be negative")
    fields = {
        "resort_name": resort_name,
        "resort_gstin": resort_gstin,
        "kitchen_gstin": kitchen_gstin,
        "resort_address": resort_address,
        "resort_contact": resort_contact,
        "resort_email": resort_email,
        "tax_rate": str(tax_rate),
    }
    logo_file = None
    if logo is not None and logo.filename:
        logo_file = (logo.filename, await logo.read(), logo.content_type or "application/octet-stream")
    return await run_in_threadpool(client.update_settings, fields, logo_file)


# ========== Services ==========

@app.get("/services")
def get_services(active_only: bool = False, client: ResortApiClient = Depends(get_api_client)):
    services = load_services(client)
    if active_only:
        active_ids = {entry.id for entry in RateTable.from_catalog(services, CatalogKind.SERVICE).active_entries()}
        services = [row for row in services if int(row["id"]) in active_ids]
    return services


@app.post("/services")
def create_service(service: ServiceCreate, session: ConsoleSession = Depends(get_current_session),
                   client: ResortApiClient = Depends(get_api_client)):
    session.require("can_manage_services", "Only admin and reception can manage services")
    created = client.create_service(service.to_payload())
    redis_client.invalidate_services_cache()
    return created


@app.put("/services/{service_id}")
def update_service(service_id: int, service: ServiceCreate, session: ConsoleSession = Depends(get_current_session),
                   client: ResortApiClient = Depends(get_api_client)):
    session.require("can_manage_services", "Only admin and reception can manage services")
    updated = client.update_service(service_id, service.to_payload())
    redis_client.invalidate_services_cache()
    return updated


@app.delete("/services/{service_id}")
def delete_service(service_id: int, session: ConsoleSession = Depends(get_current_session),
                   client: ResortApiClient = Depends(get_api_client)):
    session.require("can_manage_services", "Only admin and reception can manage services")
    client.delete_service(service_id)
    redis_client.invalidate_services_cache()
    return {"message": "Service deleted"}


# ========== Menu items ==========

@app.get("/menu-items")
def get_menu_items(type: Optional[str] = None, active_only: bool = False,
                   client: ResortApiClient = Depends(get_api_client)):
    items = load_menu_items(client, type)
    if active_only:
        active_ids = {entry.id for entry in RateTable.from_catalog(items, CatalogKind.MENU_ITEM).active_entries()}
        items = [row for row in items if int(row["id"]) in active_ids]
    return items


@app.post("/menu-items")
def create_menu_item(item: MenuItemCreate, session: ConsoleSession = Depends(get_current_session),
                     client: ResortApiClient = Depends(get_api_client)):
    session.require("can_manage_menu_items", "Only administrators can manage menu items")
    created = client.create_menu_item(item.to_payload())
    redis_client.invalidate_menu_items_cache()
    return created


@app.put("/menu-items/{item_id}")
def update_menu_item(item_id: int, item: MenuItemCreate, session: ConsoleSession = Depends(get_current_session),
                     client: ResortApiClient = Depends(get_api_client)):
    session.require("can_manage_menu_items", "Only administrators can manage menu items")
    updated = client.update_menu_item(item_id, item.to_payload())
    redis_client.invalidate_menu_items_cache()
    return updated


@app.delete("/menu-items/{item_id}")
def delete_menu_item(item_id: int, session: ConsoleSession = Depends(get_current_session),
                     client: ResortApiClient = Depends(get_api_client)):
    session.require("can_manage_menu_items", "Only administrators can manage menu items")
    client.delete_menu_item(item_id)
    redis_client.invalidate_menu_items_cache()
    return {"message": "Menu item deleted"}


# ========== Guests ==========

@app.get("/guests")
def get_guests(search: Optional[str] = None, client: ResortApiClient = Depends(get_api_client)):
    return load_guests(client, search)


@app.post("/guests")
def create_guest(guest: GuestCreate, session: ConsoleSession = Depends(get_current_session),
                 client: ResortApiClient = Depends(get_api_client)):
    session.require("can_manage_guests", "Only admin and reception can register guests")
    created = client.create_guest(guest.dict())
    redis_client.invalidate_guests_cache()
    return created


# ========== Kitchen orders ==========

@app.get("/kitchen-orders")
def get_kitchen_orders(start_date: Optional[date] = None, end_date: Optional[date] = None,
                       status: Optional[str] = None,
                       session: ConsoleSession = Depends(get_current_session),
                       client: ResortApiClient = Depends(get_api_client)):
    session.require("can_view_kitchen_orders")
    if status == "all":
        status = None
    return client.get_kitchen_orders(start_date, end_date, status)


@app.get("/kitchen-orders/{order_id}")
def get_kitchen_order(order_id: int, session: ConsoleSession = Depends(get_current_session),
                      client: ResortApiClient = Depends(get_api_client)):
    session.require("can_view_kitchen_orders")
    order = client.get_kitchen_order(order_id)
    detail = display_document(order, CatalogKind.MENU_ITEM)
    detail["allowed_actions"] = lifecycle.allowed_actions(order, session.capabilities)
    return detail


@app.post("/kitchen-orders/preview")
def preview_kitchen_order(draft: InvoiceDraft, session: ConsoleSession = Depends(get_current_session),
                          client: ResortApiClient = Depends(get_api_client)):
    session.require("can_create_kitchen_order")
    rate_table = RateTable.from_catalog(load_menu_items(client), CatalogKind.MENU_ITEM)
    return draft_summary(snapshot_items(rate_table, draft.items))


@app.post("/kitchen-orders")
def create_kitchen_order(order: KitchenOrderCreate, session: ConsoleSession = Depends(get_current_session),
                         client: ResortApiClient = Depends(get_api_client)):
    session.require("can_create_kitchen_order", "Only admin and kitchen staff can create orders")

    rate_table = RateTable.from_catalog(load_menu_items(client), CatalogKind.MENU_ITEM)
    lines = snapshot_items(rate_table, order.items)
    guest = guest_fields(client, order)

    order_data = {
        "guest_id": guest["guest_id"],
        "room_number": guest["room_number"],
        "guest_name": guest["guest_name"],
        "order_type": order.order_type,
        "items": [line.to_payload() for line in lines],
    }
    created = client.create_kitchen_order(order_data)
    logger.info("Kitchen order created for %s (%s items)", guest["guest_name"], len(lines))
    return {"order": created, "totals": draft_summary(lines)}


@app.put("/kitchen-orders/{order_id}/status")
def update_kitchen_order_status(order_id: int, update: OrderStatusUpdate,
                                session: ConsoleSession = Depends(get_current_session),
                                client: ResortApiClient = Depends(get_api_client)):
    if update.action:
        target = lifecycle.target_for_action(update.action).value
    elif update.status:
        target = update.status
    else:
        raise ValidationFailure("Provide a status or an action")

    order = client.get_kitchen_order(order_id)
    action = lifecycle.validate_transition(order.get("status"), target, session.capabilities)

    client.update_kitchen_order_status(order_id, target)
    order["status"] = target
    logger.info("Order %s: %s by %s", order_id, action, session.user.get("username"))
    return {
        "message": f"Order status updated to {target}",
        "status": target,
        "allowed_actions": lifecycle.allowed_actions(order, session.capabilities),
    }


@app.post("/kitchen-orders/{order_id}/create-invoice")
def create_invoice_from_kitchen_order(order_id: int, payment: CreateInvoiceFromOrder,
                                      session: ConsoleSession = Depends(get_current_session),
                                      client: ResortApiClient = Depends(get_api_client)):
    order = client.get_kitchen_order(order_id)
    lifecycle.validate_create_invoice(order, session.capabilities)

    created = client.create_invoice_from_kitchen_order(order_id, {
        "payment_status": payment.payment_status.value,
        "payment_method": payment.payment_method.value,
    })

    refreshed = client.get_kitchen_order(order_id)
    invoice_id = refreshed.get("invoice_id")
    if invoice_id is None and isinstance(created, dict):
        invoice_id = (created.get("invoice") or {}).get("id") or created.get("invoice_id")
        refreshed["invoice_id"] = invoice_id
    logger.info("Invoice %s created from order %s", invoice_id, order_id)
    return {"message": "Invoice created successfully", "invoice_id": invoice_id, "order": refreshed}


# ========== Invoices ==========

@app.get("/invoices")
def get_invoices(start_date: Optional[date] = None, end_date: Optional[date] = None,
                 type: Optional[str] = None,
                 session: ConsoleSession = Depends(get_current_session),
                 client: ResortApiClient = Depends(get_api_client)):
    session.require("can_view_invoices")
    return client.get_invoices(start_date, end_date, type)


@app.get("/invoices/aggregated/{invoice_type}")
def get_aggregated_invoices(invoice_type: InvoiceType, from_date: date, to_date: date, guest_name: str,
                            session: ConsoleSession = Depends(get_current_session),
                            client: ResortApiClient = Depends(get_api_client)):
    session.require("can_view_invoices")
    if not guest_name.strip():
        raise ValidationFailure("All fields are required")

    data = client.get_aggregated_invoices(invoice_type, from_date, to_date, guest_name)
    header_key = f"{invoice_type.value}_info"
    header = data.get(header_key)
    if header is None:
        header = client.get_settings()
    return compose_aggregated_report(data.get("invoices") or [], guest_name, from_date, to_date,
                                     invoice_type, header)


@app.post("/invoices/aggregated/{invoice_type}/email")
def email_aggregated_invoices(invoice_type: InvoiceType, from_date: date, to_date: date, guest_name: str,
                              email: AggregatedEmail,
                              session: ConsoleSession = Depends(get_current_session),
                              client: ResortApiClient = Depends(get_api_client)):
    session.require("can_view_invoices")
    client.send_aggregated_email(invoice_type, from_date, to_date, guest_name, email.email_to)
    return {"message": "Email sent"}


@app.post("/invoices/preview")
def preview_invoice(draft: InvoiceDraft, session: ConsoleSession = Depends(get_current_session),
                    client: ResortApiClient = Depends(get_api_client)):
    session.require("can_create_invoice")
    rate_table = RateTable.from_catalog(load_services(client), CatalogKind.SERVICE)
    return draft_summary(snapshot_items(rate_table, draft.items))


@app.post("/invoices")
def create_invoice(invoice: InvoiceCreate, session: ConsoleSession = Depends(get_current_session),
                   client: ResortApiClient = Depends(get_api_client)):
    session.require("can_create_invoice", "Only admin and reception can create invoices")

    rate_table = RateTable.from_catalog(load_services(client), CatalogKind.SERVICE)
    lines = snapshot_items(rate_table, invoice.items)
    guest = guest_fields(client, invoice)

    invoice_data = dict(guest)
    invoice_data.update({
        "type": InvoiceType.RESORT.value,
        "items": [line.to_payload() for line in lines],
        "payment_status": invoice.payment_status.value,
        "payment_method": invoice.payment_method.value,
        "notes": invoice.notes,
        "bookingDate": invoice.booking_date,
        "check_in_time": invoice.check_in_time,
        "check_out_time": invoice.check_out_time,
    })
    created = client.create_invoice(invoice_data)
    logger.info("Resort invoice created for %s", guest["guest_name"])
    return {"invoice": (created or {}).get("invoice", created), "totals": draft_summary(lines)}


@app.get("/invoices/{invoice_id}")
def get_invoice(invoice_id: int, session: ConsoleSession = Depends(get_current_session),
                client: ResortApiClient = Depends(get_api_client)):
    session.require("can_view_invoices")
    invoice = client.get_invoice(invoice_id)
    kind = CatalogKind.MENU_ITEM if invoice.get("type") == InvoiceType.KITCHEN.value else CatalogKind.SERVICE
    return display_document(invoice, kind)


@app.put("/invoices/{invoice_id}/payment")
def update_invoice_payment(invoice_id: int, payment: PaymentUpdate,
                           session: ConsoleSession = Depends(get_current_session),
                           client: ResortApiClient = Depends(get_api_client)):
    session.require("can_update_payment")
    body = lifecycle.validate_payment_update(payment.payment_status, payment.payment_method)
    client.update_invoice_payment(invoice_id, body)
    return {"message": "Payment updated successfully", **body}


@app.put("/invoices/{invoice_id}/checkout")
def update_checkout_time(invoice_id: int, checkout: CheckoutUpdate,
                         session: ConsoleSession = Depends(get_current_session),
                         client: ResortApiClient = Depends(get_api_client)):
    session.require("can_update_payment")
    body = lifecycle.validate_payment_update(check_out_time=checkout.check_out_time)
    client.update_invoice_payment(invoice_id, body)
    return {"message": "Checkout time updated successfully", **body}


@app.delete("/invoices/{invoice_id}")
def delete_invoice(invoice_id: int, session: ConsoleSession = Depends(get_current_session),
                   client: ResortApiClient = Depends(get_api_client)):
    session.require("can_delete_invoice", "Only administrators can delete invoices")
    client.delete_invoice(invoice_id)
    logger.info("Invoice %s deleted by %s", invoice_id, session.user.get("username"))
    return {"message": "Invoice deleted successfully"}


@app.post("/invoices/{invoice_id}/email")
def email_invoice(invoice_id: int, session: ConsoleSession = Depends(get_current_session),
                  client: ResortApiClient = Depends(get_api_client)):
    session.require("can_view_invoices")
    client.email_invoice(invoice_id)
    return {"message": "Invoice sent"}


# ========== Reports ==========

@app.get("/reports/dashboard")
def get_dashboard(session: ConsoleSession = Depends(get_current_session),
                  client: ResortApiClient = Depends(get_api_client)):
    data = client.get_dashboard() or {}
    if not session.capabilities.can_view_amounts:
        data = hide_amounts(data)
    return data


@app.get("/reports/sales")
def get_sales_report(start_date: date, end_date: date, type: Optional[str] = None,
                     session: ConsoleSession = Depends(get_current_session),
                     client: ResortApiClient = Depends(get_api_client)):
    session.require("can_view_reports")
    return client.get_sales_report(start_date, end_date, type)


@app.get("/reports/gst")
def get_gst_report(start_date: date, end_date: date,
                   session: ConsoleSession = Depends(get_current_session),
                   client: ResortApiClient = Depends(get_api_client)):
    session.require("can_view_reports")
    return client.get_gst_report(start_date, end_date)


@app.get("/reports/kitchen-items")
def get_kitchen_items_report(start_date: date, end_date: date,
                             session: ConsoleSession = Depends(get_current_session),
                             client: ResortApiClient = Depends(get_api_client)):
    session.require("can_view_reports")
    return client.get_kitchen_items_report(start_date, end_date)


@app.get("/reports/{kind}/download")
def download_report(kind: str, start_date: Optional[date] = None, end_date: Optional[date] = None,
                    type: Optional[str] = None,
                    session: ConsoleSession = Depends(get_current_session),
                    client: ResortApiClient = Depends(get_api_client)):
    session.require("can_view_reports")
    if kind not in REPORT_DOWNLOADS:
        raise HTTPException(status_code=404, detail="Report not found")
    _, _, dated = REPORT_DOWNLOADS[kind]
    if dated and (start_date is None or end_date is None):
        raise ValidationFailure("start_date and end_date are required")

    download = client.download_report(kind, start_date, end_date, type)
    logger.info("Report %s downloaded (%s bytes)", kind, len(download))
    return Response(
        content=download.content,
        media_type=download.content_type,
        headers={"Content-Disposition": f'attachment; filename="{download.filename}"'},
    )


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
