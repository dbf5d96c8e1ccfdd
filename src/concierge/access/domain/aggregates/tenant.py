"""Tenant (company) directory entry."""

from __future__ import annotations

from dataclasses import dataclass

from access.domain.value_objects import TenantId


@dataclass(frozen=True)
class Tenant:
    """A company owning a subset of application data.

    Read by downstream screens; never mutated by the access context.
    """

    id: TenantId
    name: str
    contact_email: str | None = None

    def __str__(self) -> str:
        """Return string representation."""
        return f"Tenant({self.name})"
