import pytest

from errors import PermissionDenied
from models import Role
from permissions import CAPABILITIES, kitchen_complete_roles, resolve_capabilities


def test_admin_has_every_capability():
    admin = resolve_capabilities("admin")

    assert admin.role == Role.ADMIN
    assert all(admin.as_dict().values())


def test_reception_capabilities():
    reception = resolve_capabilities(Role.RECEPTION)

    assert reception.can_create_invoice
    assert reception.can_update_payment
    assert reception.can_manage_guests
    assert not reception.can_delete_invoice
    assert not reception.can_manage_users
    assert not reception.can_view_amounts
    assert not reception.can_create_kitchen_order


def test_kitchen_capabilities():
    kitchen = resolve_capabilities("kitchen")

    assert kitchen.can_create_kitchen_order
    assert kitchen.can_update_kitchen_status
    assert kitchen.can_complete_kitchen_order
    assert not kitchen.can_create_invoice
    assert not kitchen.can_view_reports


def test_as_dict_lists_all_capabilities():
    assert set(resolve_capabilities("reception").as_dict()) == set(CAPABILITIES)


def test_require_raises_permission_denied():
    reception = resolve_capabilities("reception")

    with pytest.raises(PermissionDenied) as exc_info:
        reception.require("can_delete_invoice")

    assert exc_info.value.status_code == 403
    assert exc_info.value.details["role"] == "reception"


def test_require_unknown_capability_is_a_programming_error():
    with pytest.raises(ValueError):
        resolve_capabilities("admin").require("can_fly")


def test_unknown_role_is_rejected():
    with pytest.raises(ValueError):
        resolve_capabilities("manager")


def test_complete_roles_from_environment(monkeypatch):
    monkeypatch.setenv("KITCHEN_COMPLETE_ROLES", "admin,reception")

    assert resolve_capabilities("reception").can_complete_kitchen_order
    assert not resolve_capabilities("kitchen").can_complete_kitchen_order


def test_misspelt_complete_roles_names_the_setting(monkeypatch):
    monkeypatch.setenv("KITCHEN_COMPLETE_ROLES", "admin,kichen")

    with pytest.raises(RuntimeError) as exc_info:
        kitchen_complete_roles()

    assert "KITCHEN_COMPLETE_ROLES" in str(exc_info.value)
    assert "'kichen'" in str(exc_info.value)
