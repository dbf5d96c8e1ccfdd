"""Principal: the identity handed over by the identity provider."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from access.domain.value_objects import PrincipalId, normalize_email

_HOSTED_AVATAR_HOST = "googleusercontent.com"
_HOSTED_AVATAR_SIZE = re.compile(r"=s\d+-c")


@dataclass(frozen=True)
class Principal:
    """Authenticated identity for the current sign-in.

    Immutable for the lifetime of a session; a new sign-in produces a new
    Principal.
    """

    id: PrincipalId
    email: str
    display_name: str | None = None
    avatar_url: str | None = None

    @property
    def normalized_email(self) -> str:
        """Lowercased email, the key of the allowlist."""
        return normalize_email(self.email)

    def with_avatar_size(self, size: int) -> Principal:
        """Return a copy whose hosted avatar URL requests the given size.

        Avatars served by googleusercontent.com carry a ``=s<N>-c`` size
        token; other URLs are left untouched and a missing URL becomes ``""``.
        """
        url = self.avatar_url or ""
        if _HOSTED_AVATAR_HOST in url:
            url = _HOSTED_AVATAR_SIZE.sub(f"=s{size}-c", url)
        return replace(self, avatar_url=url)

    def __str__(self) -> str:
        """Return string representation."""
        return f"Principal({self.email})"
