"""PostgreSQL implementation of ITenantRepository.

The company directory is read-only from the access context.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import Select

from access.domain.aggregates import Tenant
from access.domain.value_objects import TenantId
from access.infrastructure.models import CompanyModel
from access.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from access.ports.exceptions import DirectoryReadError
from access.ports.repositories import ITenantRepository

_COLLECTION = "companies"


class TenantRepository(ITenantRepository):
    """PostgreSQL-backed company directory reads."""

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with a session factory and probe.

        Args:
            sessionmaker: Factory for short-lived sessions, one per call
            probe: Optional domain probe for observability
        """
        self._sessionmaker = sessionmaker
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a company by id.

        Raises:
            DirectoryReadError: If the query fails
        """
        try:
            async with self._sessionmaker() as session:
                model = await session.get(CompanyModel, tenant_id.value)
        except SQLAlchemyError as e:
            self._probe.read_failed("get_by_id", str(e))
            raise DirectoryReadError(f"Failed to read company: {e}", _COLLECTION) from e

        if model is None:
            self._probe.tenant_not_found(tenant_id.value)
            return None

        self._probe.tenant_retrieved(tenant_id.value)
        return self._to_domain(model)

    async def find_by_name(self, name: str) -> list[Tenant]:
        """Equality query on the company name."""
        stmt = select(CompanyModel).where(CompanyModel.name == name)
        return await self._query("find_by_name", stmt)

    async def find_by_contact_email(self, email: str) -> list[Tenant]:
        """Equality query on the company contact email."""
        stmt = select(CompanyModel).where(CompanyModel.contact_email == email)
        return await self._query("find_by_contact_email", stmt)

    async def list_all(self) -> list[Tenant]:
        """List every company ordered by name."""
        stmt = select(CompanyModel).order_by(CompanyModel.name, CompanyModel.id)
        return await self._query("list_all", stmt)

    async def _query(self, operation: str, stmt: Select) -> list[Tenant]:
        try:
            async with self._sessionmaker() as session:
                result = await session.execute(stmt)
                models = list(result.scalars().all())
        except SQLAlchemyError as e:
            self._probe.read_failed(operation, str(e))
            raise DirectoryReadError(f"Failed to query companies: {e}", _COLLECTION) from e

        self._probe.tenants_queried(operation, len(models))
        return [self._to_domain(model) for model in models]

    @staticmethod
    def _to_domain(model: CompanyModel) -> Tenant:
        return Tenant(
            id=TenantId(value=model.id),
            name=model.name,
            contact_email=model.contact_email,
        )
