"""Domain-Oriented Observability for the access application layer.

Probes for session resolution following Domain-Oriented Observability patterns.
"""

from access.application.observability.allowlist_resolver_probe import (
    AllowlistResolverProbe,
    DefaultAllowlistResolverProbe,
)
from access.application.observability.profile_reconciler_probe import (
    DefaultProfileReconcilerProbe,
    ProfileReconcilerProbe,
)
from access.application.observability.session_controller_probe import (
    DefaultSessionControllerProbe,
    SessionControllerProbe,
)
from access.application.observability.tenant_directory_probe import (
    DefaultTenantDirectoryProbe,
    TenantDirectoryProbe,
)

__all__ = [
    "AllowlistResolverProbe",
    "DefaultAllowlistResolverProbe",
    "ProfileReconcilerProbe",
    "DefaultProfileReconcilerProbe",
    "SessionControllerProbe",
    "DefaultSessionControllerProbe",
    "TenantDirectoryProbe",
    "DefaultTenantDirectoryProbe",
]
