"""PostgreSQL implementation of IUserProfileRepository.

Profiles are merge-written: a patch only touches the columns it sets, so
concurrent writers of other columns are never clobbered.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from access.domain.aggregates import ProfilePatch, UserProfile
from access.domain.value_objects import PrincipalId, TenantId
from access.infrastructure.models import UserProfileModel
from access.infrastructure.observability import (
    DefaultUserProfileRepositoryProbe,
    UserProfileRepositoryProbe,
)
from access.ports.exceptions import DirectoryReadError, DirectoryWriteError
from access.ports.repositories import IUserProfileRepository

_COLLECTION = "user_profiles"

# Patch field -> column
_COLUMNS = {
    "email": "email",
    "display_name": "display_name",
    "avatar_url": "avatar_url",
    "role": "role",
    "permissions": "permissions",
    "tenant_name": "company_name",
}


class UserProfileRepository(IUserProfileRepository):
    """PostgreSQL-backed repository for UserProfile documents."""

    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        probe: UserProfileRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with a session factory and probe.

        Args:
            sessionmaker: Factory for short-lived sessions, one per call
            probe: Optional domain probe for observability
        """
        self._sessionmaker = sessionmaker
        self._probe = probe or DefaultUserProfileRepositoryProbe()

    async def get_by_id(self, principal_id: PrincipalId) -> UserProfile | None:
        """Retrieve a profile by principal id.

        Raises:
            DirectoryReadError: If the query fails
        """
        try:
            async with self._sessionmaker() as session:
                model = await session.get(UserProfileModel, principal_id.value)
        except SQLAlchemyError as e:
            self._probe.read_failed("get_by_id", str(e))
            raise DirectoryReadError(f"Failed to read profile: {e}", _COLLECTION) from e

        if model is None:
            self._probe.profile_not_found(principal_id.value)
            return None

        self._probe.profile_retrieved(principal_id.value)
        return self._to_domain(model)

    async def merge(self, principal_id: PrincipalId, patch: ProfilePatch) -> None:
        """Merge-write a patch, inserting the row if it does not exist.

        Raises:
            DirectoryWriteError: If the write fails
        """
        fields = patch.changed_fields()
        try:
            async with self._sessionmaker.begin() as session:
                model = await session.get(UserProfileModel, principal_id.value, with_for_update=True)
                created = model is None
                if model is None:
                    model = UserProfileModel(id=principal_id.value)
                    session.add(model)
                self._apply(model, patch)
        except SQLAlchemyError as e:
            self._probe.write_failed(principal_id.value, str(e))
            raise DirectoryWriteError(f"Failed to merge profile: {e}", _COLLECTION) from e

        self._probe.profile_merged(principal_id.value, fields, created)

    @staticmethod
    def _apply(model: UserProfileModel, patch: ProfilePatch) -> None:
        for field_name, column in _COLUMNS.items():
            value = getattr(patch, field_name)
            if value is not None:
                setattr(model, column, value)
        if patch.tenant_id is not None:
            model.company_id = patch.tenant_id.value
        if patch.created_at is not None:
            model.created_at = patch.created_at

    @staticmethod
    def _to_domain(model: UserProfileModel) -> UserProfile:
        return UserProfile(
            principal_id=PrincipalId(value=model.id),
            email=model.email,
            display_name=model.display_name,
            avatar_url=model.avatar_url,
            tenant_id=TenantId.from_optional(model.company_id),
            role=model.role,
            permissions=model.permissions,
            tenant_name=model.company_name,
            created_at=model.created_at,
        )
