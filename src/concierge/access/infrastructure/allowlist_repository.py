"""PostgreSQL implementation of IAllowlistRepository.

Read-only adapter over the authorized_users table. Rows are maintained by
administrative tooling outside the access context.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from access.domain.aggregates import AuthorizationRecord
from access.domain.value_objects import TenantId
from access.infrastructure.models import AuthorizedUserModel
from access.infrastructure.observability import (
    AllowlistRepositoryProbe,
    DefaultAllowlistRepositoryProbe,
)
from access.ports.exceptions import DirectoryReadError
from access.ports.repositories import IAllowlistRepository

_COLLECTION = "authorized_users"


class AllowlistRepository(IAllowlistRepository):
    """PostgreSQL-backed allowlist reads."""

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        probe: AllowlistRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with a session factory and probe.

        Args:
            sessionmaker: Factory for short-lived sessions, one per call
            probe: Optional domain probe for observability
        """
        self._sessionmaker = sessionmaker
        self._probe = probe or DefaultAllowlistRepositoryProbe()

    async def get_by_key(self, key: str) -> AuthorizationRecord | None:
        """Retrieve an allowlist entry by its primary key.

        Args:
            key: Row id, the lowercased email for current records

        Returns:
            The record, or None if no row has that id

        Raises:
            DirectoryReadError: If the query fails
        """
        try:
            async with self._sessionmaker() as session:
                model = await session.get(AuthorizedUserModel, key)
        except SQLAlchemyError as e:
            self._probe.read_failed("get_by_key", str(e))
            raise DirectoryReadError(f"Failed to read allowlist entry: {e}", _COLLECTION) from e

        if model is None:
            self._probe.record_not_found(key)
            return None

        self._probe.record_retrieved(key)
        return self._to_domain(model)

    async def find_by_email(self, email: str) -> list[AuthorizationRecord]:
        """Equality scan over the email column.

        Rows come back oldest first so "first match" is stable.

        Args:
            email: Exact value to match

        Returns:
            Matching records (possibly empty)

        Raises:
            DirectoryReadError: If the query fails
        """
        stmt = (
            select(AuthorizedUserModel)
            .where(AuthorizedUserModel.email == email)
            .order_by(AuthorizedUserModel.created_at, AuthorizedUserModel.id)
        )
        try:
            async with self._sessionmaker() as session:
                result = await session.execute(stmt)
                models = list(result.scalars().all())
        except SQLAlchemyError as e:
            self._probe.read_failed("find_by_email", str(e))
            raise DirectoryReadError(f"Failed to scan allowlist: {e}", _COLLECTION) from e

        self._probe.email_scanned(email, len(models))
        return [self._to_domain(model) for model in models]

    @staticmethod
    def _to_domain(model: AuthorizedUserModel) -> AuthorizationRecord:
        return AuthorizationRecord(
            key=model.id,
            email=model.email,
            tenant_id=TenantId.from_optional(model.company_id),
            role=model.role,
            permissions=model.permissions,
            tenant_name=model.company_name,
        )
