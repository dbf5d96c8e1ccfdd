"""Domain-Oriented Observability for access infrastructure.

Probes for directory store repository operations.
"""

from access.infrastructure.observability.repository_probe import (
    AllowlistRepositoryProbe,
    DefaultAllowlistRepositoryProbe,
    DefaultTenantRepositoryProbe,
    DefaultUserProfileRepositoryProbe,
    TenantRepositoryProbe,
    UserProfileRepositoryProbe,
)

__all__ = [
    "AllowlistRepositoryProbe",
    "DefaultAllowlistRepositoryProbe",
    "UserProfileRepositoryProbe",
    "DefaultUserProfileRepositoryProbe",
    "TenantRepositoryProbe",
    "DefaultTenantRepositoryProbe",
]
