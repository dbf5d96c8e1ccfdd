"""Identity provider port."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from access.domain.aggregates import Principal

IdentityListener = Callable[[Principal | None], None]
"""Callback invoked with the new principal, or None when signed out."""

Unsubscribe = Callable[[], None]
"""Disposer returned by a subscription."""


@runtime_checkable
class IdentityProvider(Protocol):
    """Push-based source of authenticated principals.

    Implementations must call every listener once with the current identity
    right after subscription, then again on every change.
    """

    def subscribe(self, listener: IdentityListener) -> Unsubscribe:
        """Register a listener and return a disposer that removes it."""
        ...

    async def sign_out(self) -> None:
        """Terminate the provider-side session.

        Listeners are notified with None as a consequence.
        """
        ...
