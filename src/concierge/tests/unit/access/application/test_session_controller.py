"""Unit tests for SessionController.

The controller runs against the in-memory directory store and identity
provider; only the probe is mocked.
"""

import asyncio
from unittest.mock import create_autospec

import pytest

from access.application.observability import SessionControllerProbe
from access.application.services import (
    AllowlistResolver,
    ProfileReconciler,
    SessionController,
    TenantDirectoryService,
)
from access.application.session_store import SessionStore
from access.domain.aggregates import AuthorizationRecord, Principal, UserProfile
from access.domain.value_objects import PrincipalId, SessionStatus, TenantId
from access.infrastructure.identity_provider import InMemoryIdentityProvider
from access.infrastructure.memory import (
    InMemoryAllowlistRepository,
    InMemoryTenantRepository,
    InMemoryUserProfileRepository,
)
from access.ports.exceptions import DirectoryReadError, TenantAssignmentError
from access.ports.repositories import IUserProfileRepository


class GatedAllowlist(InMemoryAllowlistRepository):
    """Allowlist whose keyed reads can be held open per key."""

    def __init__(self, records=()):
        super().__init__(records)
        self.gates: dict[str, asyncio.Event] = {}
        self.fail_with: Exception | None = None

    async def get_by_key(self, key):
        if self.fail_with is not None:
            raise self.fail_with
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        return await super().get_by_key(key)


@pytest.fixture
def allowlist(jane_record):
    """Allowlist containing jane."""
    return GatedAllowlist([jane_record])


@pytest.fixture
def profiles():
    """Empty profile collection."""
    return InMemoryUserProfileRepository()


@pytest.fixture
def tenants(acme):
    """Company directory containing acme."""
    return InMemoryTenantRepository([acme])


@pytest.fixture
def provider():
    """Identity provider with nobody signed in."""
    return InMemoryIdentityProvider()


@pytest.fixture
def mock_probe(make_probe):
    """Create mock session controller probe."""
    return make_probe(SessionControllerProbe)


@pytest.fixture
def build(provider, allowlist, profiles, tenants, access_settings, mock_probe):
    """Build a controller over the shared collaborators."""

    def factory(profile_repo=None):
        repo = profile_repo or profiles
        return SessionController(
            identity_provider=provider,
            resolver=AllowlistResolver.with_default_strategies(allowlist, repo),
            reconciler=ProfileReconciler(repo),
            profiles=repo,
            store=SessionStore(),
            tenant_directory=TenantDirectoryService(tenants),
            settings=access_settings,
            probe=mock_probe,
        )

    return factory


@pytest.fixture
def controller(build):
    """Controller over the default collaborators."""
    return build()


def record_states(controller):
    """Collect every published state."""
    states = []
    controller.session.subscribe(states.append)
    return states


def bob():
    return Principal(id=PrincipalId("uid-bob"), email="bob@example.test", display_name="Bob")


class TestLifecycle:
    """Tests for start/stop."""

    @pytest.mark.asyncio
    async def test_start_without_principal_is_ready_and_idle(self, controller, provider):
        """The provider reports nobody: nothing to resolve."""
        controller.start()

        state = controller.state
        assert state.ready is True
        assert state.status is SessionStatus.IDLE
        assert state.principal is None
        assert provider.listener_count == 1
        await controller.stop()

    @pytest.mark.asyncio
    async def test_stop_unsubscribes_and_tears_down_store(self, controller, provider, mock_probe):
        """After stop() the provider has no listener and the store is inactive."""
        controller.start()
        await controller.stop()

        assert provider.listener_count == 0
        mock_probe.controller_stopped.assert_called_once_with(pending_attempts=0)

    @pytest.mark.asyncio
    async def test_async_context_manager(self, controller, provider, jane):
        """The controller can be used as an async context manager."""
        provider.sign_in(jane)
        async with controller as running:
            state = await running.settle()
            assert state.status is SessionStatus.AUTHORIZED_WITH_TENANT
        assert provider.listener_count == 0


class TestAuthorizedResolution:
    """Tests for successful resolution."""

    @pytest.mark.asyncio
    async def test_authorized_with_tenant(self, controller, provider, jane, acme, profiles):
        """An allowlisted principal ends authorized with its company."""
        controller.start()
        provider.sign_in(jane)
        state = await controller.settle()

        assert state.status is SessionStatus.AUTHORIZED_WITH_TENANT
        assert state.ready is True
        assert state.principal.id == jane.id
        assert state.tenant_id == TenantId("acme")
        assert state.role == "agent"
        assert state.tenant == acme
        assert state.error is None
        assert (await profiles.get_by_id(jane.id)).role == "agent"
        await controller.stop()

    @pytest.mark.asyncio
    async def test_avatar_is_normalized(self, controller, provider, jane):
        """Hosted avatars are resized before they reach the session."""
        controller.start()
        provider.sign_in(jane)
        state = await controller.settle()

        assert state.principal.avatar_url.endswith("=s96-c")
        await controller.stop()

    @pytest.mark.asyncio
    async def test_authorized_without_tenant(self, controller, provider, allowlist):
        """An allowlist entry without company leaves the tenant unresolved."""
        allowlist.put(AuthorizationRecord(key="bob@example.test", role="agent"))
        controller.start()
        provider.sign_in(bob())
        state = await controller.settle()

        assert state.status is SessionStatus.AUTHORIZED_NO_TENANT
        assert state.ready is True
        assert state.tenant_id is None
        assert state.role == "agent"
        await controller.stop()

    @pytest.mark.asyncio
    async def test_admin_gets_finance(self, controller, provider, allowlist):
        """Admin sessions carry finance permission by default."""
        allowlist.put(
            AuthorizationRecord(key="bob@example.test", tenant_id=TenantId("acme"), role="Owner")
        )
        controller.start()
        provider.sign_in(bob())
        state = await controller.settle()

        assert state.is_admin
        assert state.permissions.finance is True
        await controller.stop()

    @pytest.mark.asyncio
    async def test_legacy_record_is_resolved_and_backfilled(
        self, controller, provider, allowlist, profiles, jane
    ):
        """A record found only by email scan authorizes and backfills the profile."""
        allowlist._records.clear()
        allowlist.put(
            AuthorizationRecord(
                key="legacy-1",
                email="jane@gmail.com",
                tenant_id=TenantId("acme"),
                role="agent",
            )
        )
        controller.start()
        provider.sign_in(jane)
        state = await controller.settle()

        assert state.tenant_id == TenantId("acme")
        stored = await profiles.get_by_id(jane.id)
        assert stored.tenant_id == TenantId("acme")
        assert stored.role == "agent"
        await controller.stop()


class TestReadinessOrdering:
    """ready is only asserted with every other field settled."""

    @pytest.mark.asyncio
    async def test_ready_only_on_final_state(self, controller, provider, jane):
        """The in-flight state is never ready; the final one is complete."""
        controller.start()
        states = record_states(controller)
        provider.sign_in(jane)
        await controller.settle()

        assert [s.status for s in states] == [
            SessionStatus.RESOLVING,
            SessionStatus.AUTHORIZED_WITH_TENANT,
        ]
        assert states[0].ready is False
        ready_states = [s for s in states if s.ready]
        assert ready_states == [states[-1]]
        final = ready_states[0]
        assert final.principal is not None
        assert final.tenant_id is not None
        assert final.role is not None
        await controller.stop()


class TestDenial:
    """Tests for principals outside the allowlist."""

    @pytest.mark.asyncio
    async def test_unknown_email_is_denied_and_signed_out(
        self, controller, provider, mock_probe
    ):
        """Denied: provider signed out once, principal cleared, error kept."""
        stranger = Principal(id=PrincipalId("uid-x"), email="Stranger@Nowhere.test")
        controller.start()
        states = record_states(controller)
        provider.sign_in(stranger)
        state = await controller.settle()

        assert provider.sign_out_calls == 1
        assert SessionStatus.DENIED in [s.status for s in states]
        assert state.principal is None
        assert state.tenant_id is None
        assert state.ready is True
        assert "stranger@nowhere.test" in state.error
        mock_probe.access_denied.assert_called_once_with(
            principal_id="uid-x", email="stranger@nowhere.test"
        )
        await controller.stop()

    @pytest.mark.asyncio
    async def test_denied_state_never_exposes_principal(self, controller, provider):
        """The denied snapshot itself carries no principal."""
        controller.start()
        states = record_states(controller)
        provider.sign_in(bob())
        await controller.settle()

        denied = [s for s in states if s.status is SessionStatus.DENIED]
        assert len(denied) == 1
        assert denied[0].principal is None
        assert denied[0].ready is True
        await controller.stop()

    @pytest.mark.asyncio
    async def test_sign_out_failure_is_recorded(self, controller, provider, mock_probe):
        """A provider that refuses to sign out does not break the controller."""

        async def refuse():
            raise RuntimeError("network down")

        provider.sign_out = refuse
        controller.start()
        provider.sign_in(bob())
        state = await controller.settle()

        assert state.status is SessionStatus.DENIED
        mock_probe.sign_out_failed.assert_called_once_with(error="network down")
        await controller.stop()


class TestDirectoryFailures:
    """Tests for store failures during resolution."""

    @pytest.mark.asyncio
    async def test_read_failure_surfaces_generic_error(
        self, controller, provider, allowlist, jane, access_settings, mock_probe
    ):
        """A failed allowlist read keeps resolving, ready, with a generic error."""
        allowlist.fail_with = DirectoryReadError("permission denied", "authorized_users")
        controller.start()
        provider.sign_in(jane)
        state = await controller.settle()

        assert state.ready is True
        assert state.status is SessionStatus.RESOLVING
        assert state.error == access_settings.read_failure_message
        assert state.tenant_id is None
        assert state.role is None
        assert provider.sign_out_calls == 0
        mock_probe.resolution_failed.assert_called_once()
        await controller.stop()

    @pytest.mark.asyncio
    async def test_profile_write_failure_is_not_user_visible(
        self, build, provider, jane, mock_probe
    ):
        """A failed profile write still yields a ready, populated session."""
        failing = create_autospec(IUserProfileRepository, instance=True)
        failing.get_by_id.return_value = None
        failing.merge.side_effect = RuntimeError("write refused")
        controller = build(profile_repo=failing)

        controller.start()
        provider.sign_in(jane)
        state = await controller.settle()

        assert state.ready is True
        assert state.tenant_id == TenantId("acme")
        assert state.role == "agent"
        assert state.error is None
        assert state.status is SessionStatus.AUTHORIZED_WITH_TENANT
        mock_probe.profile_bookkeeping_failed.assert_called_once()
        await controller.stop()


class TestStaleness:
    """Latest identity event wins."""

    @pytest.mark.asyncio
    async def test_superseded_attempt_is_discarded(
        self, controller, provider, allowlist, jane, mock_probe
    ):
        """Two quick sign-ins: only the second principal is published."""
        allowlist.put(
            AuthorizationRecord(key="bob@example.test", tenant_id=TenantId("acme"), role="admin")
        )
        controller.start()
        provider.sign_in(jane)
        provider.sign_in(bob())
        state = await controller.settle()

        assert state.principal.id == PrincipalId("uid-bob")
        assert state.role == "admin"
        assert mock_probe.stale_resolution_discarded.called
        await controller.stop()

    @pytest.mark.asyncio
    async def test_sign_out_during_resolution_wins(self, controller, provider, allowlist, jane):
        """A late result does not resurrect a signed-out session."""
        gate = asyncio.Event()
        allowlist.gates["jane@gmail.com"] = gate
        controller.start()
        provider.sign_in(jane)
        await asyncio.sleep(0)

        provider.expire()
        gate.set()
        state = await controller.settle()

        assert state.principal is None
        assert state.status is SessionStatus.IDLE
        assert state.ready is True

    @pytest.mark.asyncio
    async def test_stop_discards_in_flight_attempt(
        self, controller, provider, allowlist, jane, mock_probe
    ):
        """Tearing down mid-resolution cancels the attempt without publishing."""
        allowlist.gates["jane@gmail.com"] = asyncio.Event()
        controller.start()
        provider.sign_in(jane)
        await asyncio.sleep(0)

        await controller.stop()

        mock_probe.controller_stopped.assert_called_once_with(pending_attempts=1)
        assert controller.state.ready is False


class TestSignOut:
    """Tests for explicit sign-out."""

    @pytest.mark.asyncio
    async def test_sign_out_returns_to_idle(self, controller, provider, jane):
        """Signing out clears the session."""
        controller.start()
        provider.sign_in(jane)
        await controller.settle()

        await controller.sign_out()

        assert controller.state.principal is None
        assert controller.state.status is SessionStatus.IDLE
        assert controller.state.ready is True
        assert provider.sign_out_calls == 1
        await controller.stop()

    @pytest.mark.asyncio
    async def test_sign_out_clears_previous_error(self, controller, provider):
        """The denial message does not survive an explicit sign-out."""
        controller.start()
        provider.sign_in(bob())
        await controller.settle()
        assert controller.state.error

        await controller.sign_out()

        assert controller.state.error is None
        await controller.stop()


class TestAssignTenant:
    """Tests for manual company assignment."""

    @pytest.fixture
    def companyless(self, allowlist):
        """Allowlist bob without a company."""
        allowlist.put(AuthorizationRecord(key="bob@example.test", role="agent"))
        return bob()

    @pytest.mark.asyncio
    async def test_assigns_company_and_updates_session(
        self, controller, provider, profiles, companyless, acme, mock_probe
    ):
        """The profile is merge-written and the session gains the company."""
        controller.start()
        provider.sign_in(companyless)
        await controller.settle()

        state = await controller.assign_tenant("acme")

        assert state.status is SessionStatus.AUTHORIZED_WITH_TENANT
        assert state.tenant_id == TenantId("acme")
        assert state.tenant == acme
        assert state.role == "agent"
        assert controller.state == state
        stored = await profiles.get_by_id(companyless.id)
        assert stored.tenant_id == TenantId("acme")
        assert stored.tenant_name == "Acme Concierge"
        mock_probe.tenant_assigned.assert_called_once_with("uid-bob", "acme", "agent")
        await controller.stop()

    @pytest.mark.asyncio
    async def test_explicit_role(self, controller, provider, companyless):
        """A role passed by the caller is recorded."""
        controller.start()
        provider.sign_in(companyless)
        await controller.settle()

        state = await controller.assign_tenant(TenantId("acme"), role="manager")

        assert state.role == "manager"
        await controller.stop()

    @pytest.mark.asyncio
    async def test_unknown_company_leaves_state_unchanged(
        self, controller, provider, profiles, companyless
    ):
        """An unknown company raises and writes nothing."""
        controller.start()
        provider.sign_in(companyless)
        before = await controller.settle()
        writes = len(profiles.merges)

        with pytest.raises(TenantAssignmentError):
            await controller.assign_tenant("ghost-co")

        assert controller.state == before
        assert len(profiles.merges) == writes
        await controller.stop()

    @pytest.mark.asyncio
    async def test_requires_signed_in_principal(self, controller):
        """Without a principal there is nobody to assign."""
        controller.start()

        with pytest.raises(TenantAssignmentError):
            await controller.assign_tenant("acme")
        await controller.stop()

    @pytest.mark.asyncio
    async def test_write_failure_raises(self, build, provider, allowlist, acme):
        """A failed merge surfaces as TenantAssignmentError."""
        failing = create_autospec(IUserProfileRepository, instance=True)
        failing.get_by_id.return_value = UserProfile(
            principal_id=PrincipalId("uid-bob"), email="bob@example.test", role="agent"
        )
        controller = build(profile_repo=failing)
        allowlist.put(AuthorizationRecord(key="bob@example.test", role="agent"))
        controller.start()
        provider.sign_in(bob())
        before = await controller.settle()
        failing.merge.side_effect = RuntimeError("write refused")

        with pytest.raises(TenantAssignmentError) as exc_info:
            await controller.assign_tenant("acme")

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert controller.state == before
        await controller.stop()

    @pytest.mark.asyncio
    async def test_refused_after_read_failure(
        self, controller, provider, allowlist, profiles, mock_probe
    ):
        """A principal left unresolved by a failed read cannot claim a company."""
        mallory = Principal(id=PrincipalId("uid-mallory"), email="mallory@evil.test")
        allowlist.fail_with = DirectoryReadError("permission denied", "authorized_users")
        controller.start()
        provider.sign_in(mallory)
        before = await controller.settle()
        assert before.status is SessionStatus.RESOLVING
        assert before.ready is True

        with pytest.raises(TenantAssignmentError):
            await controller.assign_tenant("acme", role="admin")

        assert controller.state == before
        assert profiles.merges == []
        assert await profiles.get_by_id(mallory.id) is None
        mock_probe.tenant_assignment_failed.assert_called_once_with(
            "uid-mallory", "acme", "not authorized"
        )

        allowlist.fail_with = None
        provider.sign_in(mallory)
        state = await controller.settle()

        assert state.status is SessionStatus.IDLE
        assert provider.sign_out_calls == 1
        assert "mallory@evil.test" in state.error
        await controller.stop()

    @pytest.mark.asyncio
    async def test_requires_company_directory(
        self, provider, allowlist, profiles, access_settings, mock_probe, companyless
    ):
        """Without a directory the company cannot be verified, so nothing is written."""
        controller = SessionController(
            identity_provider=provider,
            resolver=AllowlistResolver.with_default_strategies(allowlist, profiles),
            reconciler=ProfileReconciler(profiles),
            profiles=profiles,
            store=SessionStore(),
            settings=access_settings,
            probe=mock_probe,
        )
        controller.start()
        provider.sign_in(companyless)
        before = await controller.settle()
        writes = len(profiles.merges)

        with pytest.raises(TenantAssignmentError):
            await controller.assign_tenant("ghost-co")

        assert controller.state == before
        assert len(profiles.merges) == writes
        await controller.stop()


class TestSessionListeners:
    """Tests for subscribers that fail while being notified."""

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_skip_forced_sign_out(
        self, controller, provider, mock_probe
    ):
        """A denial still signs the principal out when a subscriber raises."""

        def broken(state):
            if state.status is SessionStatus.DENIED:
                raise RuntimeError("render failed")

        controller.start()
        controller.session.subscribe(broken)
        provider.sign_in(bob())
        state = await controller.settle()

        assert provider.sign_out_calls == 1
        assert state.status is SessionStatus.IDLE
        assert "bob@example.test" in state.error
        mock_probe.session_listener_failed.assert_called_once_with(
            status="denied", error="render failed"
        )
        await controller.stop()

    @pytest.mark.asyncio
    async def test_failing_listener_still_reaches_ready(
        self, controller, provider, jane, mock_probe
    ):
        """Authorized sessions settle even if a subscriber raises on every state."""

        def broken(_state):
            raise RuntimeError("render failed")

        controller.start()
        controller.session.subscribe(broken)
        provider.sign_in(jane)
        state = await controller.settle()

        assert state.ready is True
        assert state.status is SessionStatus.AUTHORIZED_WITH_TENANT
        assert mock_probe.session_listener_failed.call_count >= 2
        await controller.stop()
