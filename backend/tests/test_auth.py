import pytest

import auth
from auth import ConsoleSession
from errors import NotAuthenticated, PermissionDenied


ADMIN_USER = {"id": 1, "username": "admin", "full_name": "Resort Admin", "role": "admin"}


def test_create_and_verify_access_token_contains_sub_and_role():
    """A token made by create_access_token decodes back with verify_token."""
    data = {"sub": "test-user", "role": "admin"}

    token = auth.create_access_token(data)
    assert isinstance(token, str)
    assert len(token.split(".")) == 3

    payload = auth.verify_token(token)
    assert payload is not None
    assert payload["sub"] == data["sub"]
    assert payload["role"] == data["role"]
    assert "exp" in payload
    assert payload["jti"]


def test_verify_token_returns_none_for_invalid_token():
    assert auth.verify_token("invalid.token.value") is None


def test_login_resolves_capabilities_once():
    session = ConsoleSession().login("upstream-token", ADMIN_USER)

    assert session.is_authenticated
    assert session.role.value == "admin"
    assert session.capabilities.can_manage_users
    assert session.session_id


def test_login_requires_token_and_known_role():
    with pytest.raises(NotAuthenticated):
        ConsoleSession().login("", ADMIN_USER)
    with pytest.raises(NotAuthenticated):
        ConsoleSession().login("tok", dict(ADMIN_USER, role="manager"))


def test_logout_clears_session():
    session = ConsoleSession().login("upstream-token", ADMIN_USER)

    session.logout()

    assert not session.is_authenticated
    assert session.user is None
    with pytest.raises(NotAuthenticated):
        session.require("can_view_invoices")


def test_require_checks_capability():
    session = ConsoleSession().login("tok", {"id": 2, "username": "chef", "role": "kitchen"})

    session.require("can_create_kitchen_order")
    with pytest.raises(PermissionDenied):
        session.require("can_create_invoice")


def test_console_token_roundtrip_keeps_upstream_token():
    session = ConsoleSession().login("upstream-token", ADMIN_USER)

    restored = ConsoleSession.from_token(session.issue_token())

    assert restored.token == "upstream-token"
    assert restored.user["username"] == "admin"
    assert restored.user["id"] == 1
    assert restored.session_id == session.session_id
    assert restored.expires_at is not None
    assert restored.capabilities.as_dict() == session.capabilities.as_dict()


def test_from_token_rejects_garbage():
    with pytest.raises(NotAuthenticated):
        ConsoleSession.from_token("invalid.token.value")
    with pytest.raises(NotAuthenticated):
        ConsoleSession.from_token(auth.create_access_token({"sub": "x", "role": "admin"}))


def test_bad_complete_roles_setting_is_not_reported_as_bad_user_role(monkeypatch):
    """A deployment typo must surface as a config error, not as 'Unsupported role'."""
    monkeypatch.setenv("KITCHEN_COMPLETE_ROLES", "admn")

    with pytest.raises(RuntimeError, match="KITCHEN_COMPLETE_ROLES"):
        ConsoleSession().login("upstream-token", ADMIN_USER)
