import pytest

import lifecycle
from errors import AlreadyInvoiced, ForbiddenTransition, PermissionDenied, ValidationFailure
from models import OrderStatus
from permissions import resolve_capabilities


ADMIN = resolve_capabilities("admin")
RECEPTION = resolve_capabilities("reception")
KITCHEN = resolve_capabilities("kitchen")


@pytest.mark.parametrize("current,target,action", [
    ("pending", "processing", "start_processing"),
    ("pending", "cancelled", "cancel"),
    ("processing", "completed", "mark_completed"),
])
def test_valid_transitions_return_action(current, target, action):
    assert lifecycle.validate_transition(current, target, ADMIN) == action
    assert lifecycle.validate_transition(current, target, KITCHEN) == action


@pytest.mark.parametrize("current,target", [
    ("pending", "completed"),
    ("processing", "pending"),
    ("processing", "cancelled"),
    ("completed", "processing"),
    ("completed", "cancelled"),
    ("cancelled", "pending"),
    ("pending", "pending"),
])
def test_forbidden_transitions(current, target):
    with pytest.raises(ForbiddenTransition) as exc_info:
        lifecycle.validate_transition(current, target, ADMIN)

    assert exc_info.value.status_code == 409
    assert exc_info.value.details == {"current": current, "target": target}


def test_reception_cannot_move_orders():
    with pytest.raises(PermissionDenied):
        lifecycle.validate_transition("pending", "processing", RECEPTION)


def test_completion_roles_come_from_environment(monkeypatch):
    monkeypatch.setenv("KITCHEN_COMPLETE_ROLES", "admin")
    kitchen = resolve_capabilities("kitchen")

    assert lifecycle.validate_transition("pending", "processing", kitchen) == "start_processing"
    with pytest.raises(PermissionDenied):
        lifecycle.validate_transition("processing", "completed", kitchen)


def test_unknown_status_is_validation_failure():
    with pytest.raises(ValidationFailure):
        lifecycle.validate_transition("cooking", "completed", ADMIN)


def test_get_allowed_transitions():
    assert lifecycle.get_allowed_transitions("pending") == [OrderStatus.PROCESSING, OrderStatus.CANCELLED]
    assert lifecycle.get_allowed_transitions("processing") == [OrderStatus.COMPLETED]
    assert lifecycle.get_allowed_transitions("completed") == []
    assert lifecycle.can_transition("pending", "cancelled") is True
    assert lifecycle.can_transition("cancelled", "pending") is False


def test_target_for_action():
    assert lifecycle.target_for_action("mark_completed") == OrderStatus.COMPLETED
    with pytest.raises(ValidationFailure):
        lifecycle.target_for_action("reopen")


def test_allowed_actions_depend_on_role_and_status():
    assert lifecycle.allowed_actions({"status": "pending"}, KITCHEN) == ["start_processing", "cancel"]
    assert lifecycle.allowed_actions({"status": "pending"}, RECEPTION) == []

    completed = {"id": 5, "status": "completed", "invoice_id": None}
    assert lifecycle.allowed_actions(completed, RECEPTION) == ["create_invoice"]
    assert lifecycle.allowed_actions(completed, KITCHEN) == []
    assert lifecycle.allowed_actions(dict(completed, invoice_id=12), ADMIN) == []


def test_create_invoice_from_completed_order():
    lifecycle.validate_create_invoice({"id": 1, "status": "completed", "invoice_id": None}, RECEPTION)


def test_create_invoice_twice_is_rejected():
    order = {"id": 1, "status": "completed", "invoice_id": 40}

    with pytest.raises(AlreadyInvoiced) as exc_info:
        lifecycle.validate_create_invoice(order, ADMIN)

    assert exc_info.value.invoice_id == 40


@pytest.mark.parametrize("status", ["pending", "processing", "cancelled"])
def test_create_invoice_requires_completed_order(status):
    with pytest.raises(ForbiddenTransition):
        lifecycle.validate_create_invoice({"id": 1, "status": status, "invoice_id": None}, ADMIN)


def test_kitchen_cannot_create_invoice():
    with pytest.raises(PermissionDenied):
        lifecycle.validate_create_invoice({"id": 1, "status": "completed", "invoice_id": None}, KITCHEN)


def test_payment_update_allows_any_known_status():
    assert lifecycle.validate_payment_update("paid", "upi") == {"payment_status": "paid", "payment_method": "upi"}
    assert lifecycle.validate_payment_update("pending") == {"payment_status": "pending"}
    assert lifecycle.validate_payment_update(check_out_time=" 11:00 ") == {"check_out_time": "11:00"}


def test_payment_update_rejects_bad_values():
    with pytest.raises(ValidationFailure):
        lifecycle.validate_payment_update("refunded")
    with pytest.raises(ValidationFailure):
        lifecycle.validate_payment_update(payment_method="cheque")
    with pytest.raises(ValidationFailure):
        lifecycle.validate_payment_update(check_out_time="  ")
    with pytest.raises(ValidationFailure):
        lifecycle.validate_payment_update()
