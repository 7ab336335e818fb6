"""
Client for the resort REST backend.

One method per upstream endpoint. Every call is a single request/response
round trip: no retries, no caching (see redis_client for that). Failures are
raised as NetworkFailure with the upstream message when there is one.
"""
import logging
from typing import Any, Dict, Optional

import requests

from errors import NetworkFailure, ValidationFailure
from reports import REPORT_DOWNLOADS, ReportDownload, XLSX_CONTENT_TYPE, as_invoice_type, format_date, \
    parse_date, report_query

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "API request failed"


class ResortApiClient:

    def __init__(self, base_url: str, session, timeout: float = 15.0, http: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout
        self.http = http or requests.Session()

    def close(self):
        self.http.close()

    def _headers(self, json_body: bool) -> Dict[str, str]:
        headers = {}
        if json_body:
            headers["Content-Type"] = "application/json"
        if self.session is not None and self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        return headers

    def _send(self, method: str, endpoint: str, *, json: Any = None, params: Optional[dict] = None,
              data: Optional[dict] = None, files: Optional[dict] = None) -> requests.Response:
        url = f"{self.base_url}{endpoint}"
        multipart = files is not None or data is not None
        try:
            response = self.http.request(
                method,
                url,
                json=json,
                params=params,
                data=data,
                files=files,
                headers=self._headers(json_body=not multipart),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, endpoint, e)
            raise NetworkFailure(f"Resort API unreachable: {e}")

        logger.debug("%s %s -> %s", method, endpoint, response.status_code)
        if not response.ok:
            message = DEFAULT_ERROR_MESSAGE
            try:
                body = response.json()
                if isinstance(body, dict) and body.get("message"):
                    message = body["message"]
            except ValueError:
                pass
            logger.warning("%s %s returned %s: %s", method, endpoint, response.status_code, message)
            raise NetworkFailure(message, upstream_status=response.status_code)
        return response

    def request(self, method: str, endpoint: str, **kwargs) -> Any:
        response = self._send(method, endpoint, **kwargs)
        content_type = response.headers.get("content-type", "")
        if "application/pdf" in content_type:
            return response.content
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise NetworkFailure("Resort API returned an invalid response", upstream_status=response.status_code)

    # ========== Auth ==========

    def login(self, username: str, password: str) -> dict:
        return self.request("POST", "/auth/login", json={"username": username, "password": password})

    # ========== Users ==========

    def get_users(self):
        return self.request("GET", "/users")

    def create_user(self, user_data: dict):
        return self.request("POST", "/users", json=user_data)

    def update_user(self, user_id: int, user_data: dict):
        return self.request("PUT", f"/users/{user_id}", json=user_data)

    def update_user_password(self, user_id: int, password: str):
        return self.request("PUT", f"/users/{user_id}/password", json={"password": password})

    def delete_user(self, user_id: int):
        return self.request("DELETE", f"/users/{user_id}")

    # ========== Settings ==========

    def get_settings(self):
        return self.request("GET", "/settings")

    def update_settings(self, fields: dict, logo: Optional[tuple] = None):
        """``logo`` is a (filename, bytes, content_type) tuple.

        Always sent as multipart/form-data, with or without a logo.
        """
        if logo:
            return self.request("PUT", "/settings", data=fields, files={"logo": logo})
        # requests falls back to urlencoded when files is empty
        files = {key: (None, str(value)) for key, value in fields.items()}
        return self.request("PUT", "/settings", files=files)

    # ========== Menu items ==========

    def get_menu_items(self, item_type: Optional[str] = None):
        params = {"type": item_type} if item_type else None
        return self.request("GET", "/menu-items", params=params)

    def create_menu_item(self, item_data: dict):
        return self.request("POST", "/menu-items", json=item_data)

    def update_menu_item(self, item_id: int, item_data: dict):
        return self.request("PUT", f"/menu-items/{item_id}", json=item_data)

    def delete_menu_item(self, item_id: int):
        return self.request("DELETE", f"/menu-items/{item_id}")

    # ========== Services ==========

    def get_services(self):
        return self.request("GET", "/services")

    def create_service(self, service_data: dict):
        return self.request("POST", "/services", json=service_data)

    def update_service(self, service_id: int, service_data: dict):
        return self.request("PUT", f"/services/{service_id}", json=service_data)

    def delete_service(self, service_id: int):
        return self.request("DELETE", f"/services/{service_id}")

    # ========== Guests ==========

    def get_guests(self, search: Optional[str] = None):
        params = {"search": search} if search else None
        return self.request("GET", "/guests", params=params)

    def create_guest(self, guest_data: dict):
        return self.request("POST", "/guests", json=guest_data)

    # ========== Kitchen orders ==========

    def get_kitchen_orders(self, start_date=None, end_date=None, status: Optional[str] = None):
        params = report_query(start_date, end_date)
        if status:
            params["status"] = status
        return self.request("GET", "/kitchen-orders", params=params or None)

    def get_kitchen_order(self, order_id: int):
        return self.request("GET", f"/kitchen-orders/{order_id}")

    def create_kitchen_order(self, order_data: dict):
        return self.request("POST", "/kitchen-orders", json=order_data)

    def update_kitchen_order_status(self, order_id: int, status: str):
        return self.request("PUT", f"/kitchen-orders/{order_id}/status", json={"status": status})

    def create_invoice_from_kitchen_order(self, order_id: int, payment_data: dict):
        return self.request("POST", f"/kitchen-orders/{order_id}/create-invoice", json=payment_data)

    # ========== Invoices ==========

    def get_invoices(self, start_date=None, end_date=None, invoice_type: Optional[str] = None):
        params = report_query(start_date, end_date, invoice_type)
        return self.request("GET", "/invoices", params=params or None)

    def get_invoice(self, invoice_id: int):
        return self.request("GET", f"/invoices/{invoice_id}")

    def create_invoice(self, invoice_data: dict):
        return self.request("POST", "/invoices", json=invoice_data)

    def update_invoice_payment(self, invoice_id: int, payment_data: dict):
        return self.request("PUT", f"/invoices/{invoice_id}/payment", json=payment_data)

    def delete_invoice(self, invoice_id: int):
        return self.request("DELETE", f"/invoices/{invoice_id}")

    def email_invoice(self, invoice_id: int):
        return self.request("POST", f"/invoices/{invoice_id}/email")

    # ========== Aggregated invoices ==========

    def _aggregated_params(self, from_date, to_date, guest_name: str) -> dict:
        return {
            "from_date": format_date(parse_date(from_date)),
            "to_date": format_date(parse_date(to_date)),
            "guest_name": guest_name,
        }

    def get_aggregated_invoices(self, invoice_type, from_date, to_date, guest_name: str) -> dict:
        invoice_type = as_invoice_type(invoice_type).value
        body = self.request("GET", f"/invoices/aggregated/{invoice_type}",
                            params=self._aggregated_params(from_date, to_date, guest_name))
        if isinstance(body, dict) and "data" in body:
            return body["data"] or {}
        return body or {}

    def send_aggregated_email(self, invoice_type, from_date, to_date, guest_name: str, email_to: str):
        invoice_type = as_invoice_type(invoice_type).value
        params = self._aggregated_params(from_date, to_date, guest_name)
        params["email_to"] = email_to
        return self.request("POST", f"/invoices/aggregated/{invoice_type}/email", params=params)

    # ========== Reports ==========

    def get_sales_report(self, start_date, end_date, report_type: Optional[str] = None):
        return self.request("GET", "/reports/sales", params=report_query(start_date, end_date, report_type))

    def get_gst_report(self, start_date, end_date):
        return self.request("GET", "/reports/gst", params=report_query(start_date, end_date))

    def get_kitchen_items_report(self, start_date, end_date):
        return self.request("GET", "/reports/kitchen-items", params=report_query(start_date, end_date))

    def get_dashboard(self):
        return self.request("GET", "/reports/dashboard")

    def download_report(self, kind: str, start_date=None, end_date=None,
                        report_type: Optional[str] = None) -> ReportDownload:
        try:
            endpoint, filename, dated = REPORT_DOWNLOADS[kind]
        except KeyError:
            raise ValidationFailure(f"Unknown report: {kind}")
        params = report_query(start_date, end_date, report_type) if dated else None
        response = self._send("GET", endpoint, params=params)
        content_type = response.headers.get("content-type") or XLSX_CONTENT_TYPE
        return ReportDownload(filename, response.content, content_type)
