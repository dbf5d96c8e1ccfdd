"""Unit test fixtures with in-memory collaborators."""

from unittest.mock import create_autospec

import pytest

from access.domain.aggregates import AuthorizationRecord, Principal, Tenant
from access.domain.value_objects import PrincipalId, TenantId
from infrastructure.settings import AccessSettings


@pytest.fixture
def access_settings():
    """Provide access settings independent of the environment."""
    return AccessSettings(
        sign_in_path="/login",
        tenant_selection_path="/select-company",
        role_fallback_path="/",
        default_assigned_role="agent",
        avatar_size=96,
    )


@pytest.fixture
def jane():
    """Principal whose email is stored lowercased in the allowlist."""
    return Principal(
        id=PrincipalId("uid-jane"),
        email="Jane@Gmail.com",
        display_name="Jane Doe",
        avatar_url="https://lh3.googleusercontent.com/a/jane=s64-c",
    )


@pytest.fixture
def acme():
    """Company used across tests."""
    return Tenant(id=TenantId("acme"), name="Acme Concierge", contact_email="boss@acme.test")


@pytest.fixture
def jane_record():
    """Keyed allowlist record for jane."""
    return AuthorizationRecord(
        key="jane@gmail.com",
        email="jane@gmail.com",
        tenant_id=TenantId("acme"),
        role="agent",
        tenant_name="Acme Concierge",
    )


@pytest.fixture
def make_probe():
    """Autospec a probe Protocol whose with_context() returns the same mock.

    Services bind an observation context per call; returning the same mock
    keeps every recorded event on one object.
    """

    def factory(protocol):
        probe = create_autospec(protocol, instance=True)
        probe.with_context.return_value = probe
        return probe

    return factory
