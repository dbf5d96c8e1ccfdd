"""Module permissions and the capabilities derived from them."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from access.domain.roles import is_admin_role

USER_MANAGEMENT_MODULE = "user_management"

_MODULES = frozenset({"clients", "services", "reservations", "finance"})


@dataclass(frozen=True)
class ModulePermissions:
    """Which application modules a session may open."""

    clients: bool = True
    services: bool = True
    reservations: bool = True
    finance: bool = False

    def allows(self, module: str) -> bool:
        """Return True if the named module is enabled.

        Unknown module names are denied.
        """
        if module not in _MODULES:
            return False
        return getattr(self, module) is True


def normalize_permissions(raw: Mapping[str, Any] | None, role: object) -> ModulePermissions:
    """Build effective module permissions from a stored permission set.

    Non-boolean values fall back to the defaults. Admins get finance
    unless the stored set explicitly turns it off.
    """
    base = ModulePermissions()
    admin = is_admin_role(role)

    if not isinstance(raw, Mapping):
        return ModulePermissions(finance=True) if admin else base

    def pick(name: str) -> bool:
        value = raw.get(name)
        return value if isinstance(value, bool) else getattr(base, name)

    finance = pick("finance")
    if admin and raw.get("finance") is not False:
        finance = True

    return ModulePermissions(
        clients=pick("clients"),
        services=pick("services"),
        reservations=pick("reservations"),
        finance=finance,
    )


@dataclass(frozen=True)
class Capabilities:
    """Boolean capability set consumed by screens and menus."""

    is_admin: bool
    can_view_finance: bool
    can_edit_finance: bool
    can_view_clients: bool
    can_edit_clients: bool
    can_view_services: bool
    can_edit_services: bool
    can_view_reservations: bool
    can_edit_reservations: bool
    can_manage_users: bool
    can_delete_clients: bool
    can_delete_services: bool
    can_delete_reservations: bool
    can_delete_users: bool
    can_delete_properties: bool

    @classmethod
    def for_session(
        cls, role: object, permissions: ModulePermissions | None
    ) -> Capabilities:
        """Derive capabilities from a role and its module permissions."""
        admin = is_admin_role(role)
        modules = permissions or normalize_permissions(None, role)
        finance = modules.finance or admin
        return cls(
            is_admin=admin,
            can_view_finance=finance,
            can_edit_finance=finance,
            can_view_clients=modules.clients,
            can_edit_clients=modules.clients,
            can_view_services=modules.services,
            can_edit_services=modules.services,
            can_view_reservations=modules.reservations,
            can_edit_reservations=modules.reservations,
            can_manage_users=admin,
            can_delete_clients=admin,
            can_delete_services=admin,
            can_delete_reservations=admin,
            can_delete_users=admin,
            can_delete_properties=admin,
        )
