import os
from typing import Dict, FrozenSet

from errors import PermissionDenied
from models import Role


CAPABILITIES = (
    "can_manage_users",
    "can_manage_settings",
    "can_view_reports",
    "can_manage_guests",
    "can_manage_services",
    "can_manage_menu_items",
    "can_view_menu_items",
    "can_view_invoices",
    "can_create_invoice",
    "can_update_payment",
    "can_delete_invoice",
    "can_create_kitchen_order",
    "can_update_kitchen_status",
    "can_complete_kitchen_order",
    "can_view_kitchen_orders",
    "can_view_amounts",
)

ROLE_CAPABILITIES: Dict[Role, FrozenSet[str]] = {
    Role.ADMIN: frozenset(CAPABILITIES),
    Role.RECEPTION: frozenset({
        "can_manage_guests",
        "can_manage_services",
        "can_view_invoices",
        "can_create_invoice",
        "can_update_payment",
        "can_view_kitchen_orders",
    }),
    Role.KITCHEN: frozenset({
        "can_view_menu_items",
        "can_create_kitchen_order",
        "can_update_kitchen_status",
        "can_view_kitchen_orders",
    }),
}


def kitchen_complete_roles() -> FrozenSet[Role]:
    """Roles allowed to mark an order completed, from KITCHEN_COMPLETE_ROLES.

    An unknown role name raises RuntimeError naming the setting.
    """
    raw = os.getenv("KITCHEN_COMPLETE_ROLES", "admin,kitchen")
    roles = set()
    for name in raw.split(","):
        name = name.strip()
        if not name:
            continue
        try:
            roles.add(Role(name))
        except ValueError:
            raise RuntimeError(
                f"KITCHEN_COMPLETE_ROLES={raw!r} contains unknown role {name!r}; "
                f"expected any of {', '.join(role.value for role in Role)}"
            )
    return frozenset(roles)


class Capabilities:
    """Capability set resolved once per session from the user's role."""

    def __init__(self, role: Role, granted: FrozenSet[str]):
        self.role = role
        self.granted = granted

    def __getattr__(self, name):
        if name.startswith("can_"):
            if name not in CAPABILITIES:
                raise AttributeError(name)
            return name in self.granted
        raise AttributeError(name)

    def require(self, capability: str, message: str = None) -> None:
        if capability not in CAPABILITIES:
            raise ValueError(f"Unknown capability: {capability}")
        if capability not in self.granted:
            raise PermissionDenied(
                message or f"Role '{self.role.value}' is not allowed to do this",
                details={"capability": capability, "role": self.role.value},
            )

    def as_dict(self) -> Dict[str, bool]:
        return {name: name in self.granted for name in CAPABILITIES}


def resolve_capabilities(role) -> Capabilities:
    role = Role(role)
    granted = set(ROLE_CAPABILITIES[role])
    if role in kitchen_complete_roles():
        granted.add("can_complete_kitchen_order")
    else:
        granted.discard("can_complete_kitchen_order")
    return Capabilities(role, frozenset(granted))


# fail at startup on a bad KITCHEN_COMPLETE_ROLES
kitchen_complete_roles()
