"""Company directory lookups.

Profiles and allowlist entries written by older tooling sometimes store a
company *name* where a company id belongs. Resolution therefore tries the
id first, then the exact name, then a case-insensitive scan, and only then
(for admins) the company's contact email.
"""

from __future__ import annotations

from collections.abc import Sequence

from access.application.observability import (
    DefaultTenantDirectoryProbe,
    TenantDirectoryProbe,
)
from access.domain.aggregates import Tenant
from access.domain.value_objects import TenantId, normalize_email
from access.ports.repositories import ITenantRepository


def _key(value: str | None) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped.lower() if stripped else None


class TenantDirectoryService:
    """Read-only access to companies for session display and selection."""

    def __init__(
        self,
        tenants: ITenantRepository,
        probe: TenantDirectoryProbe | None = None,
    ):
        self._tenants = tenants
        self._probe = probe or DefaultTenantDirectoryProbe()

    async def list_tenants(self) -> list[Tenant]:
        """List the companies a principal may pick on the selection view."""
        tenants = await self._tenants.list_all()
        self._probe.tenants_listed(count=len(tenants))
        return tenants

    async def get_tenant(self, tenant_id: TenantId) -> Tenant | None:
        """Fetch a company by id."""
        return await self._tenants.get_by_id(tenant_id)

    async def resolve_tenant(
        self,
        identifiers: Sequence[str | None],
        contact_email: str | None = None,
    ) -> Tenant | None:
        """Find the company a stored identifier refers to.

        Args:
            identifiers: Candidate values (company id, then company name);
                blanks are skipped
            contact_email: When given and nothing else matched, a company
                whose contact email equals it is returned

        Returns:
            The matched company, or None

        Raises:
            DirectoryReadError: If a read fails
        """
        for identifier in identifiers:
            tenant = await self._resolve_identifier(identifier)
            if tenant is not None:
                return tenant

        if contact_email:
            email = normalize_email(contact_email)
            matches = await self._tenants.find_by_contact_email(email)
            if matches:
                self._probe.tenant_resolved(
                    identifier=email,
                    tenant_id=matches[0].id.value,
                    resolved_from="contact_email",
                )
                return matches[0]

        label = ", ".join(i for i in identifiers if i) or (contact_email or "")
        self._probe.tenant_unresolved(identifier=label)
        return None

    async def _resolve_identifier(self, identifier: str | None) -> Tenant | None:
        key = _key(identifier)
        if key is None:
            return None
        raw = identifier.strip()

        tenant = await self._tenants.get_by_id(TenantId(value=raw))
        if tenant is not None:
            self._probe.tenant_resolved(identifier=raw, tenant_id=tenant.id.value, resolved_from="id")
            return tenant

        by_name = await self._tenants.find_by_name(raw)
        if by_name:
            self._probe.tenant_resolved(identifier=raw, tenant_id=by_name[0].id.value, resolved_from="name")
            return by_name[0]

        # The company list is small; a full scan is acceptable here
        for candidate in await self._tenants.list_all():
            if _key(candidate.id.value) == key or _key(candidate.name) == key:
                self._probe.tenant_resolved(
                    identifier=raw, tenant_id=candidate.id.value, resolved_from="scan"
                )
                return candidate

        return None
