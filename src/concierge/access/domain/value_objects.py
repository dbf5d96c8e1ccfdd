"""Value objects for the access domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TypeVar

T = TypeVar("T")


def normalize_email(email: str) -> str:
    """Return the case-insensitive identity key for an email address."""
    return email.strip().lower()


@dataclass(frozen=True)
class PrincipalId:
    """Stable identifier handed out by the identity provider.

    The value is opaque (Firebase uid, OIDC subject, ...) and is also the
    key of the principal's profile document.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> PrincipalId:
        """Create PrincipalId from a raw provider value.

        Raises:
            ValueError: If value is empty or whitespace
        """
        stripped = value.strip()
        if not stripped:
            raise ValueError("PrincipalId must not be empty")
        return cls(value=stripped)


@dataclass(frozen=True)
class TenantId:
    """Identifier of a company document in the tenant directory."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def from_optional(cls, value: object) -> TenantId | None:
        """Parse a stored company id, treating blanks and non-strings as absent."""
        if not isinstance(value, str):
            return None
        stripped = value.strip()
        return cls(value=stripped) if stripped else None


class SessionStatus(StrEnum):
    """States of the session resolution state machine."""

    IDLE = "idle"
    RESOLVING = "resolving"
    DENIED = "denied"
    AUTHORIZED_NO_TENANT = "authorized_no_tenant"
    AUTHORIZED_WITH_TENANT = "authorized_with_tenant"


class AuthorizationSource(StrEnum):
    """Which lookup strategy produced an authorization outcome."""

    KEYED_LOOKUP = "keyed_lookup"
    EMAIL_SCAN = "email_scan"
    PROFILE = "profile"


class FieldReconciliation(StrEnum):
    """Outcome of comparing one profile field with the allowlist record."""

    KEEP = "keep"
    UNCHANGED = "unchanged"
    BACKFILL = "backfill"
    MISMATCH = "mismatch"

    @property
    def needs_write(self) -> bool:
        """Whether the authoritative value must be written to the profile."""
        return self in (FieldReconciliation.BACKFILL, FieldReconciliation.MISMATCH)


def reconcile_field(current: T | None, authoritative: T | None) -> FieldReconciliation:
    """Classify a profile value against the authoritative allowlist value.

    The allowlist wins whenever it supplies a value. When it does not, the
    profile value is kept as-is; fields are never removed.
    """
    match (current, authoritative):
        case (_, None):
            return FieldReconciliation.KEEP
        case (None, _):
            return FieldReconciliation.BACKFILL
        case _ if current == authoritative:
            return FieldReconciliation.UNCHANGED
        case _:
            return FieldReconciliation.MISMATCH
