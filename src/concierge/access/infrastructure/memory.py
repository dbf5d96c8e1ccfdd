"""In-memory directory store.

Dictionary-backed implementations of the repository ports for embedding
the engine without a database and for tests. Values are stored in
document shape so that legacy rows (allowlist entries whose key is not
the email) can be represented.
"""

from __future__ import annotations

from collections.abc import Iterable

from access.domain.aggregates import AuthorizationRecord, ProfilePatch, Tenant, UserProfile
from access.domain.value_objects import PrincipalId, TenantId
from access.ports.repositories import (
    IAllowlistRepository,
    ITenantRepository,
    IUserProfileRepository,
)


class InMemoryAllowlistRepository(IAllowlistRepository):
    """Allowlist held in insertion order."""

    def __init__(self, records: Iterable[AuthorizationRecord] = ()) -> None:
        self._records: dict[str, AuthorizationRecord] = {}
        for record in records:
            self.put(record)

    def put(self, record: AuthorizationRecord) -> None:
        """Insert or replace an entry (administrative tooling)."""
        self._records[record.key] = record

    async def get_by_key(self, key: str) -> AuthorizationRecord | None:
        return self._records.get(key)

    async def find_by_email(self, email: str) -> list[AuthorizationRecord]:
        return [record for record in self._records.values() if record.email == email]


class InMemoryUserProfileRepository(IUserProfileRepository):
    """Profile documents with merge semantics.

    ``merges`` records every patch applied, which makes write counts
    observable.
    """

    def __init__(self, profiles: Iterable[UserProfile] = ()) -> None:
        self._profiles: dict[str, UserProfile] = {p.principal_id.value: p for p in profiles}
        self.merges: list[tuple[PrincipalId, ProfilePatch]] = []

    async def get_by_id(self, principal_id: PrincipalId) -> UserProfile | None:
        return self._profiles.get(principal_id.value)

    async def merge(self, principal_id: PrincipalId, patch: ProfilePatch) -> None:
        current = self._profiles.get(principal_id.value) or UserProfile(principal_id=principal_id)
        self._profiles[principal_id.value] = current.apply(patch)
        self.merges.append((principal_id, patch))


class InMemoryTenantRepository(ITenantRepository):
    """Company directory held in insertion order."""

    def __init__(self, tenants: Iterable[Tenant] = ()) -> None:
        self._tenants: dict[str, Tenant] = {t.id.value: t for t in tenants}

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        return self._tenants.get(tenant_id.value)

    async def find_by_name(self, name: str) -> list[Tenant]:
        return [t for t in self._tenants.values() if t.name == name]

    async def find_by_contact_email(self, email: str) -> list[Tenant]:
        return [t for t in self._tenants.values() if t.contact_email == email]

    async def list_all(self) -> list[Tenant]:
        return list(self._tenants.values())
