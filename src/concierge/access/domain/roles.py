"""Role classification.

Several human-facing titles ("Manager", "Owner") grant the same access as
"Administrator". The UI keeps showing the original label; only access
decisions go through this module.
"""

from __future__ import annotations

ADMIN_ROLES: frozenset[str] = frozenset(
    {"admin", "administrator", "owner", "manager", "superadmin"}
)


def normalize_role(role: object) -> str:
    """Trim and lowercase a role; anything that is not a string becomes ``""``."""
    if not isinstance(role, str):
        return ""
    return role.strip().lower()


def is_admin_role(role: object) -> bool:
    """Return True if the role belongs to the admin role set."""
    return normalize_role(role) in ADMIN_ROLES


def has_required_role(role: object, required_role: str) -> bool:
    """Check a session role against a gate's required role.

    An admin-set requirement is satisfied by any admin role. Any other
    requirement is satisfied by the same role or by an admin role, so
    ``has_required_role("admin", "member")`` is True.
    """
    required = normalize_role(required_role)
    if not required:
        return False
    if required in ADMIN_ROLES:
        return is_admin_role(role)
    return normalize_role(role) == required or is_admin_role(role)
