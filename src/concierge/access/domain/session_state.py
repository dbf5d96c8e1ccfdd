"""Read projection of the current session."""

from __future__ import annotations

from dataclasses import dataclass

from access.domain.aggregates import Principal, Tenant
from access.domain.permissions import Capabilities, ModulePermissions
from access.domain.roles import is_admin_role
from access.domain.value_objects import SessionStatus, TenantId


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of the session as seen by consumers.

    Only the session controller publishes new snapshots. ``ready`` is True
    once the latest resolution attempt has settled every other field.
    """

    principal: Principal | None = None
    tenant_id: TenantId | None = None
    role: str | None = None
    permissions: ModulePermissions | None = None
    tenant: Tenant | None = None
    status: SessionStatus = SessionStatus.IDLE
    ready: bool = False
    error: str | None = None

    @classmethod
    def initial(cls) -> SessionState:
        """State before the identity provider has reported anything."""
        return cls()

    @classmethod
    def signed_out(cls, error: str | None = None) -> SessionState:
        """Idle state: nothing left to resolve."""
        return cls(status=SessionStatus.IDLE, ready=True, error=error)

    @property
    def is_authenticated(self) -> bool:
        """Whether a principal is attached to the session."""
        return self.principal is not None

    @property
    def is_authorized(self) -> bool:
        """Whether an allowlist strategy admitted the principal."""
        return self.status in (
            SessionStatus.AUTHORIZED_NO_TENANT,
            SessionStatus.AUTHORIZED_WITH_TENANT,
        )

    @property
    def has_tenant(self) -> bool:
        """Whether the session resolved a company."""
        return self.tenant_id is not None

    @property
    def is_admin(self) -> bool:
        """Whether the session role is in the admin role set."""
        return is_admin_role(self.role)

    @property
    def capabilities(self) -> Capabilities:
        """Capability set derived from role and module permissions."""
        return Capabilities.for_session(self.role, self.permissions)
