"""Session controller for the access bounded context.

Subscribes to the identity provider and, for every event, runs one
resolution attempt: allowlist lookup, profile reconciliation, then a
single publication of the resulting session state.

State machine:

    IDLE --principal--> RESOLVING --+--> DENIED (provider signed out)
                                    +--> AUTHORIZED_NO_TENANT
                                    +--> AUTHORIZED_WITH_TENANT
    any  --no principal--> IDLE

Attempts are not mutually exclusive. Each one captures the generation
counter when it starts and only publishes if the counter is unchanged
and the controller is still running, so the latest event always wins.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING

from ulid import ULID

from access.application.observability import (
    DefaultSessionControllerProbe,
    SessionControllerProbe,
)
from access.application.services.allowlist_resolver import AllowlistResolver
from access.application.services.profile_reconciler import ProfileReconciler
from access.application.services.tenant_directory_service import TenantDirectoryService
from access.application.session_store import SessionStore, SessionView
from access.domain.aggregates import Principal, ProfilePatch, Tenant
from access.domain.permissions import normalize_permissions
from access.domain.roles import is_admin_role
from access.domain.session_state import SessionState
from access.domain.value_objects import SessionStatus, TenantId
from access.ports.exceptions import AccessDeniedError, TenantAssignmentError
from access.ports.identity import IdentityProvider, Unsubscribe
from access.ports.repositories import IUserProfileRepository
from infrastructure.settings import AccessSettings, get_access_settings
from shared_kernel.observability_context import ObservationContext

if TYPE_CHECKING:
    from access.domain.aggregates import UserProfile


class SessionController:
    """Owns the session state and drives it from identity events."""

    def __init__(
        self,
        identity_provider: IdentityProvider,
        resolver: AllowlistResolver,
        reconciler: ProfileReconciler,
        profiles: IUserProfileRepository,
        store: SessionStore | None = None,
        tenant_directory: TenantDirectoryService | None = None,
        settings: AccessSettings | None = None,
        probe: SessionControllerProbe | None = None,
    ):
        """Initialize the controller.

        Args:
            identity_provider: Push-based source of principals
            resolver: Allowlist resolver
            reconciler: Profile reconciler
            profiles: Profile repository, used by manual company assignment
            store: Session store to own (a fresh one by default)
            tenant_directory: Optional company directory used to attach the
                company record to the session for display
            settings: Access settings (cached environment settings by default)
            probe: Optional domain probe for observability
        """
        self._identity_provider = identity_provider
        self._resolver = resolver
        self._reconciler = reconciler
        self._profiles = profiles
        self._store = store or SessionStore()
        self._tenant_directory = tenant_directory
        self._settings = settings or get_access_settings()
        self._context = ObservationContext(session_id=str(ULID()))
        self._probe = (probe or DefaultSessionControllerProbe()).with_context(self._context)

        self._generation = 0
        self._live = False
        self._unsubscribe: Unsubscribe | None = None
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def session(self) -> SessionView:
        """Read-only projection for gates and screens."""
        return self._store.view()

    @property
    def state(self) -> SessionState:
        """Current session snapshot."""
        return self._store.state

    @property
    def generation(self) -> int:
        """Number of identity events seen so far."""
        return self._generation

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Initialise the store and subscribe to the identity provider.

        Must be called from a running event loop: providers report the
        current identity synchronously on subscription.
        """
        if self._live:
            return
        self._store.init()
        self._live = True
        self._probe.controller_started()
        self._unsubscribe = self._identity_provider.subscribe(self._on_identity_changed)

    async def stop(self) -> None:
        """Unsubscribe and discard whatever is still in flight."""
        if not self._live:
            return
        self._live = False
        self._generation += 1
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        pending = list(self._pending)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._probe.controller_stopped(pending_attempts=len(pending))
        self._store.teardown()

    async def __aenter__(self) -> SessionController:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def settle(self) -> SessionState:
        """Wait until no resolution attempt is in flight.

        Returns:
            The session state after the last attempt settled
        """
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        return self._store.state

    # ------------------------------------------------------------------
    # Identity events
    # ------------------------------------------------------------------

    def _on_identity_changed(self, principal: Principal | None) -> None:
        if not self._live:
            return
        self._generation += 1
        generation = self._generation

        if principal is None:
            self._clear_session()
            return

        task = asyncio.get_running_loop().create_task(self._resolve(principal, generation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _clear_session(self) -> None:
        # The last error survives so a denial message outlives the forced sign-out
        self._probe.session_cleared()
        self._emit(SessionState.signed_out(error=self._store.state.error))

    async def _resolve(self, principal: Principal, generation: int) -> None:
        principal = principal.with_avatar_size(self._settings.avatar_size)
        context = self._context.with_generation(generation)
        probe = self._probe.with_context(context)

        probe.resolution_started(
            principal_id=principal.id.value,
            email=principal.normalized_email,
            generation=generation,
        )
        self._publish(
            generation,
            SessionState(principal=principal, status=SessionStatus.RESOLVING, ready=False),
        )

        final: SessionState | None = None
        denied = False
        try:
            outcome = await self._resolver.resolve(principal.email, principal.id, context=context)

            if not outcome.authorized:
                denied = True
                denial = AccessDeniedError(
                    principal.normalized_email,
                    self._settings.denial_message(principal.normalized_email),
                )
                probe.access_denied(principal_id=principal.id.value, email=denial.email)
                final = SessionState(status=SessionStatus.DENIED, ready=True, error=str(denial))
            else:
                result = await self._reconciler.reconcile(principal, outcome, context=context)
                if result.write_error is not None:
                    probe.profile_bookkeeping_failed(
                        principal_id=principal.id.value,
                        error=str(result.write_error),
                    )
                tenant = await self._load_tenant(result.profile, principal, probe)
                final = self._authorized_state(principal, result.profile, tenant)
                probe.session_resolved(
                    principal_id=principal.id.value,
                    status=final.status.value,
                    tenant_id=final.tenant_id.value if final.tenant_id else None,
                    role=final.role,
                )
        except Exception as e:
            probe.resolution_failed(principal_id=principal.id.value, error=str(e))
            final = self._failed_state(principal)
        finally:
            # ready is asserted once per attempt, with every other field settled
            published = self._publish(generation, final or self._failed_state(principal), probe)

        if denied and published:
            await self._force_sign_out(probe)

    def _authorized_state(
        self, principal: Principal, profile: UserProfile, tenant: Tenant | None
    ) -> SessionState:
        status = (
            SessionStatus.AUTHORIZED_WITH_TENANT
            if profile.tenant_id is not None
            else SessionStatus.AUTHORIZED_NO_TENANT
        )
        return SessionState(
            principal=principal,
            tenant_id=profile.tenant_id,
            role=profile.role,
            permissions=normalize_permissions(profile.permissions, profile.role),
            tenant=tenant,
            status=status,
            ready=True,
        )

    def _failed_state(self, principal: Principal) -> SessionState:
        return SessionState(
            principal=principal,
            status=SessionStatus.RESOLVING,
            ready=True,
            error=self._settings.read_failure_message,
        )

    async def _load_tenant(
        self,
        profile: UserProfile,
        principal: Principal,
        probe: SessionControllerProbe,
    ) -> Tenant | None:
        if self._tenant_directory is None or profile.tenant_id is None:
            return None
        contact_email = principal.normalized_email if is_admin_role(profile.role) else None
        try:
            return await self._tenant_directory.resolve_tenant(
                [profile.tenant_id.value, profile.tenant_name],
                contact_email=contact_email,
            )
        except Exception as e:
            probe.tenant_lookup_failed(tenant_id=profile.tenant_id.value, error=str(e))
            return None

    def _publish(
        self,
        generation: int,
        state: SessionState,
        probe: SessionControllerProbe | None = None,
    ) -> bool:
        if not self._live or generation != self._generation:
            (probe or self._probe).stale_resolution_discarded(
                generation=generation,
                current_generation=self._generation,
            )
            return False
        self._emit(state, probe)
        return True

    def _emit(self, state: SessionState, probe: SessionControllerProbe | None = None) -> None:
        for error in self._store.publish(state):
            (probe or self._probe).session_listener_failed(
                status=state.status.value, error=str(error)
            )

    async def _force_sign_out(self, probe: SessionControllerProbe) -> None:
        try:
            await self._identity_provider.sign_out()
        except Exception as e:
            probe.sign_out_failed(error=str(e))

    # ------------------------------------------------------------------
    # Explicit actions
    # ------------------------------------------------------------------

    async def sign_out(self) -> None:
        """Sign the current principal out.

        Clears the last error first; the provider's "no principal" event
        then moves the session to IDLE.
        """
        if self._live and self._store.state.error is not None:
            self._emit(replace(self._store.state, error=None))
        await self._identity_provider.sign_out()

    async def assign_tenant(
        self,
        tenant_id: TenantId | str,
        role: str | None = None,
    ) -> SessionState:
        """Attach the signed-in principal to a company.

        Used by the company selection view. The profile is merge-written and
        the session moves to AUTHORIZED_WITH_TENANT.

        Args:
            tenant_id: Company to join
            role: Role to record (``default_assigned_role`` when omitted)

        Returns:
            The updated session state

        Raises:
            TenantAssignmentError: If no authorized principal is signed in,
                no company directory is configured, the company does not
                exist, or the write fails. The session state is left
                unchanged.
        """
        target = tenant_id if isinstance(tenant_id, TenantId) else TenantId.from_optional(tenant_id)
        state = self._store.state
        principal = state.principal
        principal_id = principal.id.value if principal else None

        if target is None:
            self._probe.tenant_assignment_failed(principal_id, str(tenant_id), "empty company id")
            raise TenantAssignmentError("A company id is required")
        if principal is None or not state.ready:
            self._probe.tenant_assignment_failed(principal_id, target.value, "no principal")
            raise TenantAssignmentError("No signed-in user to assign")
        if not state.is_authorized:
            # Only an allowlisted principal may gain a profile tenant and role
            self._probe.tenant_assignment_failed(principal_id, target.value, "not authorized")
            raise TenantAssignmentError("The signed-in user is not authorized")
        if self._tenant_directory is None:
            self._probe.tenant_assignment_failed(principal_id, target.value, "no company directory")
            raise TenantAssignmentError("Company assignment needs a company directory")

        assigned_role = role or self._settings.default_assigned_role

        try:
            tenant = await self._tenant_directory.get_tenant(target)
        except Exception as e:
            self._probe.tenant_assignment_failed(principal_id, target.value, str(e))
            raise TenantAssignmentError(f"Failed to load company {target}") from e
        if tenant is None:
            self._probe.tenant_assignment_failed(principal_id, target.value, "unknown company")
            raise TenantAssignmentError(f"Unknown company: {target}")

        patch = ProfilePatch(
            email=principal.normalized_email,
            display_name=principal.display_name,
            avatar_url=principal.avatar_url,
            tenant_id=target,
            role=assigned_role,
            tenant_name=tenant.name,
        )
        try:
            await self._profiles.merge(principal.id, patch)
        except Exception as e:
            self._probe.tenant_assignment_failed(principal_id, target.value, str(e))
            raise TenantAssignmentError(f"Failed to assign company {target}") from e

        self._probe.tenant_assigned(principal.id.value, target.value, assigned_role)

        current = self._store.state
        if not self._live or current.principal != principal or not current.is_authorized:
            # Session moved on while the write was in flight
            return current

        updated = replace(
            current,
            tenant_id=target,
            role=assigned_role,
            tenant=tenant,
            permissions=current.permissions or normalize_permissions(None, assigned_role),
            status=SessionStatus.AUTHORIZED_WITH_TENANT,
            error=None,
        )
        self._emit(updated)
        return updated
