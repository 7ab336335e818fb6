"""
Kitchen order and invoice lifecycle rules.

Every kitchen order status change and every invoice creation from an order
goes through this module before anything is sent upstream.

    pending ──start──> processing ──complete──> completed ──> (invoice)
       │
       └──cancel──> cancelled
"""
import logging
from typing import Dict, List, Optional, Tuple

from errors import AlreadyInvoiced, ForbiddenTransition, PermissionDenied, ValidationFailure
from models import OrderStatus, PaymentMethod, PaymentStatus
from permissions import Capabilities

logger = logging.getLogger(__name__)


# =============================================================================
# KITCHEN ORDER TRANSITIONS
# =============================================================================

# (current, target) -> (action, capability required to take it)
ORDER_TRANSITIONS: Dict[Tuple[OrderStatus, OrderStatus], Tuple[str, str]] = {
    (OrderStatus.PENDING, OrderStatus.PROCESSING): ("start_processing", "can_update_kitchen_status"),
    (OrderStatus.PENDING, OrderStatus.CANCELLED): ("cancel", "can_update_kitchen_status"),
    (OrderStatus.PROCESSING, OrderStatus.COMPLETED): ("mark_completed", "can_complete_kitchen_order"),
}

ACTION_TARGETS: Dict[str, OrderStatus] = {
    action: target for (_, target), (action, _) in ORDER_TRANSITIONS.items()
}

TERMINAL_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


def _order_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationFailure(f"Unknown order status: {value!r}", details={"status": value})


def can_transition(current, target) -> bool:
    return (_order_status(current), _order_status(target)) in ORDER_TRANSITIONS


def get_allowed_transitions(current) -> List[OrderStatus]:
    current = _order_status(current)
    return [target for (source, target) in ORDER_TRANSITIONS if source == current]


def validate_transition(current, target, capabilities: Capabilities) -> str:
    """Check a status change and return the action name it corresponds to.

    Raises ForbiddenTransition for an edge that does not exist and
    PermissionDenied when the edge exists but the role may not take it.
    """
    current = _order_status(current)
    target = _order_status(target)

    edge = ORDER_TRANSITIONS.get((current, target))
    if edge is None:
        logger.info("Rejected order transition %s -> %s", current.value, target.value)
        raise ForbiddenTransition(current.value, target.value)

    action, capability = edge
    if not getattr(capabilities, capability):
        raise PermissionDenied(
            f"Role '{capabilities.role.value}' cannot {action.replace('_', ' ')} an order",
            details={"action": action, "role": capabilities.role.value},
        )
    return action


def target_for_action(action: str) -> OrderStatus:
    try:
        return ACTION_TARGETS[action]
    except KeyError:
        raise ValidationFailure(f"Unknown order action: {action!r}", details={"action": action})


def allowed_actions(order: dict, capabilities: Capabilities) -> List[str]:
    """Actions the console offers for this order and role."""
    current = _order_status(order.get("status"))
    actions = []
    for (source, _), (action, capability) in ORDER_TRANSITIONS.items():
        if source == current and getattr(capabilities, capability):
            actions.append(action)
    if can_invoice(order) and capabilities.can_create_invoice:
        actions.append("create_invoice")
    return actions


# =============================================================================
# INVOICE FROM ORDER
# =============================================================================

def can_invoice(order: dict) -> bool:
    return order.get("status") == OrderStatus.COMPLETED.value and order.get("invoice_id") is None


def validate_create_invoice(order: dict, capabilities: Capabilities) -> None:
    capabilities.require("can_create_invoice", "Only admin and reception can create invoices")

    invoice_id = order.get("invoice_id")
    if invoice_id is not None:
        raise AlreadyInvoiced(order.get("id"), invoice_id)

    status = _order_status(order.get("status"))
    if status != OrderStatus.COMPLETED:
        raise ForbiddenTransition(
            status.value, "invoiced",
            message=f"Only completed orders can be invoiced (order is '{status.value}')",
        )


# =============================================================================
# INVOICE PAYMENT
# =============================================================================

def validate_payment_update(payment_status: Optional[str] = None,
                            payment_method: Optional[str] = None,
                            check_out_time: Optional[str] = None) -> dict:
    """Build the payment update body.

    Payment status is not a forward-only machine: staff may correct it in
    either direction, so any known status is accepted.
    """
    body = {}
    if payment_status is not None:
        try:
            body["payment_status"] = PaymentStatus(payment_status).value
        except ValueError:
            raise ValidationFailure(f"Unknown payment status: {payment_status!r}")
    if payment_method is not None:
        try:
            body["payment_method"] = PaymentMethod(payment_method).value
        except ValueError:
            raise ValidationFailure(f"Unknown payment method: {payment_method!r}")
    if check_out_time is not None:
        if not check_out_time.strip():
            raise ValidationFailure("Checkout time cannot be empty")
        body["check_out_time"] = check_out_time.strip()
    if not body:
        raise ValidationFailure("Nothing to update")
    return body
