"""Profile reconciliation for the access bounded context.

The allowlist is authoritative. After a principal is authorized, its
profile document is patched with whatever the allowlist supplies that the
profile lacks or disagrees with, plus the live display attributes. Writes
are merge-writes so that fields written by other flows survive.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from access.application.observability import (
    DefaultProfileReconcilerProbe,
    ProfileReconcilerProbe,
)
from access.domain.aggregates import (
    AuthorizationOutcome,
    Principal,
    ProfilePatch,
    UserProfile,
)
from access.domain.value_objects import (
    FieldReconciliation,
    normalize_email,
    reconcile_field,
)
from access.ports.exceptions import DirectoryWriteError
from access.ports.repositories import IUserProfileRepository

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext

_AUTHORITATIVE_FIELDS = ("tenant_id", "role", "permissions", "tenant_name")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ReconciliationResult:
    """What reconciliation computed and whether it reached the store.

    ``profile`` is always the logical, post-merge profile, even when the
    write failed; the session proceeds with it.
    """

    profile: UserProfile
    patch: ProfilePatch
    created: bool = False
    overridden: tuple[str, ...] = ()
    write_error: DirectoryWriteError | None = field(default=None, compare=False)

    @property
    def written(self) -> bool:
        """True when a non-empty patch was stored successfully."""
        return not self.patch.is_empty() and self.write_error is None


class ProfileReconciler:
    """Keeps the per-principal profile in line with the allowlist."""

    def __init__(
        self,
        profiles: IUserProfileRepository,
        probe: ProfileReconcilerProbe | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """Initialize the reconciler.

        Args:
            profiles: Profile document repository
            probe: Optional domain probe for observability
            clock: Source of creation timestamps
        """
        self._profiles = profiles
        self._probe = probe or DefaultProfileReconcilerProbe()
        self._clock = clock

    async def reconcile(
        self,
        principal: Principal,
        authorization: AuthorizationOutcome,
        context: ObservationContext | None = None,
    ) -> ReconciliationResult:
        """Compute and apply the profile patch for an authorized principal.

        Args:
            principal: The live principal (source of display attributes)
            authorization: The resolved, authorized outcome
            context: Optional observation context for this attempt

        Returns:
            The reconciliation result; a failed write is reported in
            ``write_error`` instead of being raised.

        Raises:
            DirectoryReadError: If the current profile cannot be read
        """
        probe = self._probe.with_context(context) if context else self._probe
        existing = await self._profiles.get_by_id(principal.id)

        if existing is None:
            patch = self._creation_patch(principal, authorization)
            overridden: tuple[str, ...] = ()
            base = UserProfile(principal_id=principal.id)
        else:
            patch, overridden = self._update_patch(existing, principal, authorization)
            base = existing

        profile = base.apply(patch)
        result = ReconciliationResult(
            profile=profile,
            patch=patch,
            created=existing is None,
            overridden=overridden,
        )

        if patch.is_empty():
            probe.profile_unchanged(principal_id=principal.id.value)
            return result

        try:
            await self._profiles.merge(principal.id, patch)
        except Exception as e:
            error = (
                e
                if isinstance(e, DirectoryWriteError)
                else DirectoryWriteError(str(e), collection="user_profiles")
            )
            probe.profile_write_failed(
                principal_id=principal.id.value,
                fields=patch.changed_fields(),
                error=str(e),
            )
            return ReconciliationResult(
                profile=profile,
                patch=patch,
                created=result.created,
                overridden=overridden,
                write_error=error,
            )

        if result.created:
            probe.profile_created(
                principal_id=principal.id.value,
                fields=patch.changed_fields(),
            )
        else:
            probe.profile_patched(
                principal_id=principal.id.value,
                fields=patch.changed_fields(),
                overridden=list(overridden),
            )
        return result

    def _creation_patch(
        self, principal: Principal, authorization: AuthorizationOutcome
    ) -> ProfilePatch:
        return ProfilePatch(
            email=principal.normalized_email,
            display_name=principal.display_name,
            avatar_url=principal.avatar_url,
            tenant_id=authorization.tenant_id,
            role=authorization.role,
            permissions=authorization.permissions,
            tenant_name=authorization.tenant_name,
            created_at=self._clock(),
        )

    def _update_patch(
        self,
        existing: UserProfile,
        principal: Principal,
        authorization: AuthorizationOutcome,
    ) -> tuple[ProfilePatch, tuple[str, ...]]:
        changes: dict[str, Any] = {}
        overridden: list[str] = []

        for name in _AUTHORITATIVE_FIELDS:
            authoritative = getattr(authorization, name)
            verdict = reconcile_field(getattr(existing, name), authoritative)
            if verdict.needs_write:
                changes[name] = authoritative
            if verdict is FieldReconciliation.MISMATCH:
                overridden.append(name)

        if existing.email is None or normalize_email(existing.email) != principal.normalized_email:
            changes["email"] = principal.normalized_email

        # Display attributes always follow the live principal
        if principal.display_name is not None and principal.display_name != existing.display_name:
            changes["display_name"] = principal.display_name
        if principal.avatar_url is not None and principal.avatar_url != existing.avatar_url:
            changes["avatar_url"] = principal.avatar_url

        return ProfilePatch(**changes), tuple(overridden)
