"""Repository protocols (ports) for the directory store.

The directory store is a document store holding three logical
collections: the allowlist (keyed by lowercased email, scannable by its
``email`` field), profiles (keyed by principal id) and companies (keyed by
company id, read-only here).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from access.domain.aggregates import AuthorizationRecord, ProfilePatch, Tenant, UserProfile
from access.domain.value_objects import PrincipalId, TenantId


@runtime_checkable
class IAllowlistRepository(Protocol):
    """Read access to the allowlist collection."""

    async def get_by_key(self, key: str) -> AuthorizationRecord | None:
        """Retrieve an allowlist entry by document id.

        Args:
            key: Document id, the lowercased email for current records

        Returns:
            The record, or None if no document has that id

        Raises:
            DirectoryReadError: If the read fails
        """
        ...

    async def find_by_email(self, email: str) -> list[AuthorizationRecord]:
        """Equality scan over the ``email`` field.

        Args:
            email: Exact value to match

        Returns:
            Matching records in store order (possibly empty)

        Raises:
            DirectoryReadError: If the query fails
        """
        ...


@runtime_checkable
class IUserProfileRepository(Protocol):
    """Profile documents keyed by principal id."""

    async def get_by_id(self, principal_id: PrincipalId) -> UserProfile | None:
        """Retrieve a profile.

        Raises:
            DirectoryReadError: If the read fails
        """
        ...

    async def merge(self, principal_id: PrincipalId, patch: ProfilePatch) -> None:
        """Merge-write a patch into the profile document, creating it if absent.

        Only the fields set on the patch are written; other stored fields
        are left untouched.

        Raises:
            DirectoryWriteError: If the write fails
        """
        ...


@runtime_checkable
class ITenantRepository(Protocol):
    """Read access to the company directory."""

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a company by document id.

        Raises:
            DirectoryReadError: If the read fails
        """
        ...

    async def find_by_name(self, name: str) -> list[Tenant]:
        """Equality query on the company name.

        Raises:
            DirectoryReadError: If the query fails
        """
        ...

    async def find_by_contact_email(self, email: str) -> list[Tenant]:
        """Equality query on the company contact email.

        Raises:
            DirectoryReadError: If the query fails
        """
        ...

    async def list_all(self) -> list[Tenant]:
        """List every company.

        Raises:
            DirectoryReadError: If the read fails
        """
        ...
