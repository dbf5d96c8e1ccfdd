"""Allowlist resolution for the access bounded context.

An email is matched against an ordered list of lookup strategies; the
first strategy that produces an outcome wins. Store failures are never
swallowed: a failed read must not turn into a silent allow or deny.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from access.application.observability import (
    AllowlistResolverProbe,
    DefaultAllowlistResolverProbe,
)
from access.domain.aggregates import AuthorizationOutcome
from access.domain.value_objects import (
    AuthorizationSource,
    PrincipalId,
    normalize_email,
)
from access.ports.repositories import IAllowlistRepository, IUserProfileRepository

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AllowlistStrategy(Protocol):
    """One way of finding the authorization for an email."""

    name: str

    async def lookup(
        self, email: str, principal_id: PrincipalId
    ) -> AuthorizationOutcome | None:
        """Return an outcome, or None to let the next strategy try.

        Args:
            email: Already-normalized email
            principal_id: Principal being resolved
        """
        ...


class KeyedAllowlistLookup:
    """Direct read of ``authorized_users/<lowercased email>``."""

    name = AuthorizationSource.KEYED_LOOKUP.value

    def __init__(self, allowlist: IAllowlistRepository):
        self._allowlist = allowlist

    async def lookup(
        self, email: str, principal_id: PrincipalId
    ) -> AuthorizationOutcome | None:
        record = await self._allowlist.get_by_key(email)
        if record is None:
            return None
        return AuthorizationOutcome.from_record(record, AuthorizationSource.KEYED_LOOKUP)


class AllowlistEmailScan:
    """Equality scan on the ``email`` field, for records keyed otherwise."""

    name = AuthorizationSource.EMAIL_SCAN.value

    def __init__(self, allowlist: IAllowlistRepository):
        self._allowlist = allowlist

    async def lookup(
        self, email: str, principal_id: PrincipalId
    ) -> AuthorizationOutcome | None:
        matches = await self._allowlist.find_by_email(email)
        if not matches:
            return None
        return AuthorizationOutcome.from_record(matches[0], AuthorizationSource.EMAIL_SCAN)


class ProfileDerivedLookup:
    """Trust an existing profile whose stored email matches.

    Covers principals whose profile predates allowlist-based gating.
    """

    name = AuthorizationSource.PROFILE.value

    def __init__(self, profiles: IUserProfileRepository):
        self._profiles = profiles

    async def lookup(
        self, email: str, principal_id: PrincipalId
    ) -> AuthorizationOutcome | None:
        profile = await self._profiles.get_by_id(principal_id)
        if profile is None or profile.email is None:
            return None
        if normalize_email(profile.email) != email:
            return None
        return AuthorizationOutcome(
            authorized=True,
            tenant_id=profile.tenant_id,
            role=profile.role,
            permissions=profile.permissions,
            tenant_name=profile.tenant_name,
            source=AuthorizationSource.PROFILE,
        )


class AllowlistResolver:
    """Decides whether an email may use the application.

    Read-only and idempotent: no retries are performed, the next identity
    event simply resolves again.
    """

    def __init__(
        self,
        strategies: Sequence[AllowlistStrategy],
        probe: AllowlistResolverProbe | None = None,
    ):
        """Initialize the resolver.

        Args:
            strategies: Lookup strategies, tried in order
            probe: Optional domain probe for observability
        """
        if not strategies:
            raise ValueError("AllowlistResolver needs at least one strategy")
        self._strategies = tuple(strategies)
        self._probe = probe or DefaultAllowlistResolverProbe()

    @classmethod
    def with_default_strategies(
        cls,
        allowlist: IAllowlistRepository,
        profiles: IUserProfileRepository,
        probe: AllowlistResolverProbe | None = None,
    ) -> AllowlistResolver:
        """Keyed lookup, then email scan, then profile-derived fallback."""
        return cls(
            strategies=[
                KeyedAllowlistLookup(allowlist),
                AllowlistEmailScan(allowlist),
                ProfileDerivedLookup(profiles),
            ],
            probe=probe,
        )

    @property
    def strategies(self) -> tuple[AllowlistStrategy, ...]:
        """Configured strategies in evaluation order."""
        return self._strategies

    async def resolve(
        self,
        email: str,
        principal_id: PrincipalId,
        context: ObservationContext | None = None,
    ) -> AuthorizationOutcome:
        """Resolve the authorization for an email.

        Args:
            email: Email as reported by the identity provider
            principal_id: Principal being resolved (for the profile fallback)
            context: Optional observation context for this attempt

        Returns:
            The first strategy's outcome, or a denied outcome

        Raises:
            DirectoryReadError: If any store read fails
        """
        probe = self._probe.with_context(context) if context else self._probe
        normalized = normalize_email(email)

        for strategy in self._strategies:
            try:
                outcome = await strategy.lookup(normalized, principal_id)
            except Exception as e:
                probe.allowlist_lookup_failed(
                    email=normalized,
                    strategy=strategy.name,
                    error=str(e),
                )
                raise

            if outcome is None:
                probe.strategy_missed(strategy=strategy.name, email=normalized)
                continue

            probe.allowlist_resolved(
                email=normalized,
                source=strategy.name,
                tenant_id=outcome.tenant_id.value if outcome.tenant_id else None,
                role=outcome.role,
            )
            return outcome

        probe.allowlist_denied(email=normalized)
        return AuthorizationOutcome.denied()
