"""In-memory identity provider.

A push-based provider driven by explicit ``sign_in`` calls, for embedding
the engine behind an external authentication flow and for tests.
"""

from __future__ import annotations

from access.domain.aggregates import Principal
from access.ports.identity import IdentityListener, IdentityProvider, Unsubscribe


class InMemoryIdentityProvider(IdentityProvider):
    """Holds the current principal and notifies listeners on every change."""

    def __init__(self, principal: Principal | None = None) -> None:
        self._principal = principal
        self._listeners: list[IdentityListener] = []
        self.sign_out_calls = 0

    @property
    def principal(self) -> Principal | None:
        return self._principal

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: IdentityListener) -> Unsubscribe:
        self._listeners.append(listener)
        listener(self._principal)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, principal: Principal) -> None:
        """Report a newly authenticated principal."""
        self._set(principal)

    def expire(self) -> None:
        """Drop the session without an explicit sign-out (token expiry)."""
        self._set(None)

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        self._set(None)

    def _set(self, principal: Principal | None) -> None:
        self._principal = principal
        for listener in list(self._listeners):
            listener(principal)
