"""Aggregates of the access domain."""

from access.domain.aggregates.authorization_record import (
    AuthorizationOutcome,
    AuthorizationRecord,
)
from access.domain.aggregates.principal import Principal
from access.domain.aggregates.tenant import Tenant
from access.domain.aggregates.user_profile import ProfilePatch, UserProfile

__all__ = [
    "AuthorizationOutcome",
    "AuthorizationRecord",
    "Principal",
    "ProfilePatch",
    "Tenant",
    "UserProfile",
]
