"""Allowlist entries and the authorization outcome derived from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from access.domain.value_objects import AuthorizationSource, TenantId


@dataclass(frozen=True)
class AuthorizationRecord:
    """Administrator-maintained allowlist entry.

    Read-only from the engine's point of view. ``key`` is the document id:
    the lowercased email for current records, anything for legacy ones.
    """

    key: str
    email: str | None = None
    tenant_id: TenantId | None = None
    role: str | None = None
    permissions: dict[str, Any] | None = field(default=None, hash=False)
    tenant_name: str | None = None


@dataclass(frozen=True)
class AuthorizationOutcome:
    """Result of allowlist resolution for one email."""

    authorized: bool
    tenant_id: TenantId | None = None
    role: str | None = None
    permissions: dict[str, Any] | None = field(default=None, hash=False)
    tenant_name: str | None = None
    source: AuthorizationSource | None = None

    @classmethod
    def denied(cls) -> AuthorizationOutcome:
        """Outcome for an email no strategy could resolve."""
        return cls(authorized=False)

    @classmethod
    def from_record(
        cls, record: AuthorizationRecord, source: AuthorizationSource
    ) -> AuthorizationOutcome:
        """Grant access with the values carried by an allowlist record."""
        return cls(
            authorized=True,
            tenant_id=record.tenant_id,
            role=record.role,
            permissions=record.permissions,
            tenant_name=record.tenant_name,
            source=source,
        )
