"""
Console error taxonomy.

Every failure the console reports carries an ``ErrorCode`` so that callers
can branch on the kind of failure instead of parsing messages.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    NETWORK_FAILURE = "network_failure"
    VALIDATION_FAILURE = "validation_failure"
    INVALID_INPUT = "invalid_input"
    FORBIDDEN_TRANSITION = "forbidden_transition"
    ALREADY_INVOICED = "already_invoiced"
    PERMISSION_DENIED = "permission_denied"
    NOT_AUTHENTICATED = "not_authenticated"


class ConsoleError(Exception):
    code = ErrorCode.VALIDATION_FAILURE
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code.value, "message": self.message, "details": self.details}


class NetworkFailure(ConsoleError):
    """Upstream request was rejected or answered with a non-2xx status."""

    code = ErrorCode.NETWORK_FAILURE
    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.upstream_status = upstream_status
        # upstream client errors are passed through, everything else is a bad gateway
        if upstream_status is not None and 400 <= upstream_status < 500:
            self.status_code = upstream_status
        if upstream_status is not None:
            self.details.setdefault("upstream_status", upstream_status)


class ValidationFailure(ConsoleError):
    code = ErrorCode.VALIDATION_FAILURE
    status_code = 422


class InvalidInput(ValidationFailure):
    code = ErrorCode.INVALID_INPUT


class ForbiddenTransition(ConsoleError):
    code = ErrorCode.FORBIDDEN_TRANSITION
    status_code = 409

    def __init__(self, current: str, target: str, message: Optional[str] = None):
        super().__init__(
            message or f"Cannot change order status from '{current}' to '{target}'",
            details={"current": current, "target": target},
        )
        self.current = current
        self.target = target


class AlreadyInvoiced(ConsoleError):
    code = ErrorCode.ALREADY_INVOICED
    status_code = 409

    def __init__(self, order_id, invoice_id):
        super().__init__(
            f"Order {order_id} already has invoice {invoice_id}",
            details={"order_id": order_id, "invoice_id": invoice_id},
        )
        self.order_id = order_id
        self.invoice_id = invoice_id


class PermissionDenied(ConsoleError):
    code = ErrorCode.PERMISSION_DENIED
    status_code = 403


class NotAuthenticated(ConsoleError):
    code = ErrorCode.NOT_AUTHENTICATED
    status_code = 401
