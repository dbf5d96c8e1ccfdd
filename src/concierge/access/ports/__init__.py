"""Ports (interfaces) for the access bounded context.

The directory store and the identity provider are external collaborators;
only their contracts live here.
"""

from access.ports.identity import IdentityListener, IdentityProvider, Unsubscribe
from access.ports.repositories import (
    IAllowlistRepository,
    ITenantRepository,
    IUserProfileRepository,
)

__all__ = [
    "IAllowlistRepository",
    "ITenantRepository",
    "IUserProfileRepository",
    "IdentityListener",
    "IdentityProvider",
    "Unsubscribe",
]
