"""Unit tests for AllowlistResolver."""

from unittest.mock import create_autospec

import pytest

from access.application.observability import AllowlistResolverProbe
from access.application.services.allowlist_resolver import (
    AllowlistEmailScan,
    AllowlistResolver,
    KeyedAllowlistLookup,
    ProfileDerivedLookup,
)
from access.domain.aggregates import AuthorizationRecord, UserProfile
from access.domain.value_objects import AuthorizationSource, PrincipalId, TenantId
from access.infrastructure.memory import (
    InMemoryAllowlistRepository,
    InMemoryUserProfileRepository,
)
from access.ports.exceptions import DirectoryReadError
from access.ports.repositories import IAllowlistRepository, IUserProfileRepository


@pytest.fixture
def mock_probe(make_probe):
    """Create mock resolver probe."""
    return make_probe(AllowlistResolverProbe)


@pytest.fixture
def mock_allowlist():
    """Create mock allowlist repository."""
    allowlist = create_autospec(IAllowlistRepository, instance=True)
    allowlist.get_by_key.return_value = None
    allowlist.find_by_email.return_value = []
    return allowlist


@pytest.fixture
def mock_profiles():
    """Create mock profile repository."""
    profiles = create_autospec(IUserProfileRepository, instance=True)
    profiles.get_by_id.return_value = None
    return profiles


@pytest.fixture
def resolver(mock_allowlist, mock_profiles, mock_probe):
    """Create resolver with the default strategy chain."""
    return AllowlistResolver.with_default_strategies(
        allowlist=mock_allowlist,
        profiles=mock_profiles,
        probe=mock_probe,
    )


class TestAllowlistResolverInit:
    """Tests for AllowlistResolver construction."""

    def test_default_strategy_order(self, resolver):
        """Keyed lookup, then scan, then profile-derived."""
        assert [type(s) for s in resolver.strategies] == [
            KeyedAllowlistLookup,
            AllowlistEmailScan,
            ProfileDerivedLookup,
        ]

    def test_requires_a_strategy(self):
        """An empty chain is a configuration error."""
        with pytest.raises(ValueError):
            AllowlistResolver(strategies=[])

    def test_uses_default_probe_when_not_provided(self, mock_allowlist):
        """Resolver should create default probe when not provided."""
        resolver = AllowlistResolver([KeyedAllowlistLookup(mock_allowlist)])
        assert resolver._probe is not None


class TestKeyedLookup:
    """Tests for the keyed lookup path."""

    @pytest.mark.asyncio
    async def test_keyed_hit_uses_lowercased_email(
        self, resolver, mock_allowlist, jane_record, mock_probe
    ):
        """The direct read uses the normalized email as key."""
        mock_allowlist.get_by_key.return_value = jane_record

        outcome = await resolver.resolve("  Jane@Gmail.com", PrincipalId("uid-jane"))

        mock_allowlist.get_by_key.assert_awaited_once_with("jane@gmail.com")
        mock_allowlist.find_by_email.assert_not_awaited()
        assert outcome.authorized is True
        assert outcome.tenant_id == TenantId("acme")
        assert outcome.role == "agent"
        assert outcome.source is AuthorizationSource.KEYED_LOOKUP
        mock_probe.allowlist_resolved.assert_called_once_with(
            email="jane@gmail.com",
            source="keyed_lookup",
            tenant_id="acme",
            role="agent",
        )


class TestLegacyScan:
    """Tests for the email scan fallback."""

    @pytest.mark.asyncio
    async def test_scan_finds_legacy_record(self, resolver, mock_allowlist, mock_profiles):
        """A record keyed otherwise is found through its email field."""
        legacy = AuthorizationRecord(
            key="legacy-7",
            email="jane@gmail.com",
            tenant_id=TenantId("acme"),
            role="agent",
        )
        mock_allowlist.find_by_email.return_value = [legacy]

        outcome = await resolver.resolve("Jane@Gmail.com", PrincipalId("uid-jane"))

        mock_allowlist.find_by_email.assert_awaited_once_with("jane@gmail.com")
        mock_profiles.get_by_id.assert_not_awaited()
        assert outcome.source is AuthorizationSource.EMAIL_SCAN
        assert outcome.tenant_id == TenantId("acme")

    @pytest.mark.asyncio
    async def test_first_scan_result_wins(self, resolver, mock_allowlist):
        """With several matches the first one is used."""
        mock_allowlist.find_by_email.return_value = [
            AuthorizationRecord(key="a", email="jane@gmail.com", role="agent"),
            AuthorizationRecord(key="b", email="jane@gmail.com", role="admin"),
        ]

        outcome = await resolver.resolve("jane@gmail.com", PrincipalId("uid-jane"))

        assert outcome.role == "agent"


class TestProfileFallback:
    """Tests for the profile-derived fallback."""

    @pytest.mark.asyncio
    async def test_matching_profile_authorizes(self, resolver, mock_profiles):
        """A profile with the same email grants its stored tenant and role."""
        mock_profiles.get_by_id.return_value = UserProfile(
            principal_id=PrincipalId("uid-jane"),
            email="JANE@gmail.com",
            tenant_id=TenantId("acme"),
            role="manager",
        )

        outcome = await resolver.resolve("jane@gmail.com", PrincipalId("uid-jane"))

        assert outcome.authorized is True
        assert outcome.role == "manager"
        assert outcome.source is AuthorizationSource.PROFILE

    @pytest.mark.asyncio
    async def test_profile_with_other_email_is_ignored(self, resolver, mock_profiles, mock_probe):
        """A profile whose email differs does not authorize."""
        mock_profiles.get_by_id.return_value = UserProfile(
            principal_id=PrincipalId("uid-jane"),
            email="someone@else.test",
            role="admin",
        )

        outcome = await resolver.resolve("jane@gmail.com", PrincipalId("uid-jane"))

        assert outcome.authorized is False
        mock_probe.allowlist_denied.assert_called_once_with(email="jane@gmail.com")


class TestDenied:
    """Tests for emails nobody knows."""

    @pytest.mark.asyncio
    async def test_unknown_email_is_denied(self, resolver, mock_probe):
        """All strategies miss: not authorized, nothing else set."""
        outcome = await resolver.resolve("nobody@nowhere.test", PrincipalId("uid-x"))

        assert outcome.authorized is False
        assert outcome.tenant_id is None
        assert mock_probe.strategy_missed.call_count == 3


class TestReadFailures:
    """Tests for failure propagation."""

    @pytest.mark.asyncio
    async def test_read_failure_propagates(self, resolver, mock_allowlist, mock_probe):
        """A failed read is raised, never turned into allow or deny."""
        mock_allowlist.find_by_email.side_effect = DirectoryReadError("boom", "authorized_users")

        with pytest.raises(DirectoryReadError):
            await resolver.resolve("jane@gmail.com", PrincipalId("uid-jane"))

        mock_probe.allowlist_lookup_failed.assert_called_once_with(
            email="jane@gmail.com",
            strategy="email_scan",
            error="boom",
        )
        mock_probe.allowlist_denied.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_retry_after_failure(self, resolver, mock_allowlist):
        """The failing strategy is called once."""
        mock_allowlist.get_by_key.side_effect = DirectoryReadError("down")

        with pytest.raises(DirectoryReadError):
            await resolver.resolve("jane@gmail.com", PrincipalId("uid-jane"))

        assert mock_allowlist.get_by_key.await_count == 1


class TestWithInMemoryStore:
    """Resolver against the in-memory directory store."""

    @pytest.mark.asyncio
    async def test_keyed_record_shadows_legacy_record(self):
        """When both exist the keyed record wins."""
        allowlist = InMemoryAllowlistRepository(
            [
                AuthorizationRecord(key="legacy", email="jane@gmail.com", role="agent"),
                AuthorizationRecord(key="jane@gmail.com", email="jane@gmail.com", role="admin"),
            ]
        )
        resolver = AllowlistResolver.with_default_strategies(
            allowlist, InMemoryUserProfileRepository()
        )

        outcome = await resolver.resolve("Jane@Gmail.com", PrincipalId("uid-jane"))

        assert outcome.role == "admin"
        assert outcome.source is AuthorizationSource.KEYED_LOOKUP
