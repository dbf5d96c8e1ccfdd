"""Access gates for route-level navigation.

Gates read the session through a SessionView and return a GateDecision;
they never mutate the session. The routing layer maps decisions onto its
own primitives (spinner, redirect, render children).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from access.application.session_store import SessionView
from access.domain.permissions import USER_MANAGEMENT_MODULE, normalize_permissions
from access.domain.roles import has_required_role, is_admin_role
from infrastructure.settings import AccessSettings, get_access_settings


class GateAction(StrEnum):
    """What the routing layer should do with a guarded route."""

    WAIT = "wait"
    RENDER = "render"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class GateDecision:
    """Outcome of evaluating a gate.

    Attributes:
        action: Wait, render the children, or redirect
        location: Redirect target (only for REDIRECT)
        origin: Path to return to after sign-in, if preserved
        replace: Whether the redirect replaces the history entry
    """

    action: GateAction
    location: str | None = None
    origin: str | None = None
    replace: bool = True

    @classmethod
    def wait(cls) -> GateDecision:
        return cls(action=GateAction.WAIT)

    @classmethod
    def render(cls) -> GateDecision:
        return cls(action=GateAction.RENDER)

    @classmethod
    def redirect(cls, location: str, origin: str | None = None) -> GateDecision:
        return cls(action=GateAction.REDIRECT, location=location, origin=origin)

    @property
    def allowed(self) -> bool:
        return self.action is GateAction.RENDER


class Gate(Protocol):
    """Anything that can decide on a route."""

    def evaluate(self, current_path: str) -> GateDecision: ...


def _same_path(left: str, right: str) -> bool:
    return (left.rstrip("/") or "/") == (right.rstrip("/") or "/")


class RequireSession:
    """Requires a resolved session with a company.

    Renders nothing until the session is ready, sends anonymous visitors to
    the sign-in view (remembering where they came from) and sends signed-in
    users without a company to the company selection view.
    """

    def __init__(self, session: SessionView, settings: AccessSettings | None = None):
        self._session = session
        self._settings = settings or get_access_settings()

    def evaluate(self, current_path: str) -> GateDecision:
        state = self._session.state
        if not state.ready:
            return GateDecision.wait()
        if state.principal is None:
            return GateDecision.redirect(self._settings.sign_in_path, origin=current_path)
        if state.tenant_id is None:
            if _same_path(current_path, self._settings.tenant_selection_path):
                return GateDecision.render()
            return GateDecision.redirect(self._settings.tenant_selection_path)
        return GateDecision.render()


class RequireRole:
    """Requires the session role to satisfy a required role.

    An admin-set requirement is met by any admin role; any other
    requirement is met by that exact role or by an admin. Assumes
    RequireSession already ran, so readiness is not checked.
    """

    def __init__(
        self,
        session: SessionView,
        required_role: str = "admin",
        fallback_path: str | None = None,
        settings: AccessSettings | None = None,
    ):
        self._session = session
        self._required_role = required_role
        settings = settings or get_access_settings()
        self._fallback_path = fallback_path or settings.role_fallback_path

    @property
    def required_role(self) -> str:
        return self._required_role

    def evaluate(self, current_path: str) -> GateDecision:
        if has_required_role(self._session.state.role, self._required_role):
            return GateDecision.render()
        return GateDecision.redirect(self._fallback_path)


class RequireModule:
    """Requires an application module to be enabled for the session."""

    def __init__(
        self,
        session: SessionView,
        module: str | None,
        fallback_path: str | None = None,
        settings: AccessSettings | None = None,
    ):
        self._session = session
        self._module = module
        settings = settings or get_access_settings()
        self._fallback_path = fallback_path or settings.role_fallback_path

    def evaluate(self, current_path: str) -> GateDecision:
        if not self._module:
            return GateDecision.render()

        state = self._session.state
        if self._module == USER_MANAGEMENT_MODULE:
            allowed = is_admin_role(state.role)
        else:
            permissions = state.permissions or normalize_permissions(None, state.role)
            allowed = permissions.allows(self._module)

        if allowed:
            return GateDecision.render()
        return GateDecision.redirect(self._fallback_path)


def evaluate_gates(gates: Iterable[Gate], current_path: str) -> GateDecision:
    """Evaluate nested gates outermost first; the first non-render decision wins."""
    for gate in gates:
        decision = gate.evaluate(current_path)
        if not decision.allowed:
            return decision
    return GateDecision.render()
