"""Per-principal profile document and the patches applied to it."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any

from access.domain.value_objects import PrincipalId, TenantId


@dataclass(frozen=True)
class ProfilePatch:
    """Partial, merge-semantics write to a profile document.

    A field left as None is not written. Nothing in a patch can remove a
    stored value.
    """

    email: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    tenant_id: TenantId | None = None
    role: str | None = None
    permissions: dict[str, Any] | None = field(default=None, hash=False)
    tenant_name: str | None = None
    created_at: datetime | None = None

    def changed_fields(self) -> list[str]:
        """Names of the fields this patch writes, in declaration order."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def is_empty(self) -> bool:
        """True when the patch would write nothing."""
        return not self.changed_fields()


@dataclass(frozen=True)
class UserProfile:
    """Persisted profile of a principal, keyed by the principal id.

    Created on first successful authorization and afterwards only patched.
    """

    principal_id: PrincipalId
    email: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    tenant_id: TenantId | None = None
    role: str | None = None
    permissions: dict[str, Any] | None = field(default=None, hash=False)
    tenant_name: str | None = None
    created_at: datetime | None = None

    def apply(self, patch: ProfilePatch) -> UserProfile:
        """Return the profile as it reads after a merge-write of ``patch``."""
        changes = {name: getattr(patch, name) for name in patch.changed_fields()}
        return replace(self, **changes)
