"""Protocol for session controller observability.

Defines the interface for domain probes that capture the session state
machine: resolution attempts, their outcomes, and suppressed stale writes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class SessionControllerProbe(Protocol):
    """Domain probe for session controller operations."""

    def controller_started(self) -> None:
        """Record that the controller subscribed to the identity provider."""
        ...

    def controller_stopped(self, pending_attempts: int) -> None:
        """Record that the controller was torn down."""
        ...

    def resolution_started(self, principal_id: str, email: str, generation: int) -> None:
        """Record that a resolution attempt began for a principal."""
        ...

    def session_resolved(
        self,
        principal_id: str,
        status: str,
        tenant_id: str | None,
        role: str | None,
    ) -> None:
        """Record that a principal was authorized."""
        ...

    def access_denied(self, principal_id: str, email: str) -> None:
        """Record that a principal was rejected and is being signed out."""
        ...

    def resolution_failed(self, principal_id: str, error: str) -> None:
        """Record that a resolution attempt failed on a store read."""
        ...

    def stale_resolution_discarded(self, generation: int, current_generation: int) -> None:
        """Record that a superseded attempt's result was dropped."""
        ...

    def session_cleared(self) -> None:
        """Record that the identity provider reported no principal."""
        ...

    def profile_bookkeeping_failed(self, principal_id: str, error: str) -> None:
        """Record that the profile write failed but the session proceeds."""
        ...

    def tenant_lookup_failed(self, tenant_id: str, error: str) -> None:
        """Record that the company display record could not be loaded."""
        ...

    def sign_out_failed(self, error: str) -> None:
        """Record that the identity provider refused to sign out."""
        ...

    def tenant_assigned(self, principal_id: str, tenant_id: str, role: str) -> None:
        """Record a manual company assignment."""
        ...

    def tenant_assignment_failed(self, principal_id: str | None, tenant_id: str, error: str) -> None:
        """Record that a manual company assignment failed."""
        ...

    def session_listener_failed(self, status: str, error: str) -> None:
        """Record that a session subscriber raised while being notified."""
        ...

    def with_context(self, context: ObservationContext) -> SessionControllerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultSessionControllerProbe:
    """Default implementation of SessionControllerProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultSessionControllerProbe:
        """Create a new probe with observation context bound."""
        return DefaultSessionControllerProbe(logger=self._logger, context=context)

    def controller_started(self) -> None:
        self._logger.info("session_controller_started", **self._get_context_kwargs())

    def controller_stopped(self, pending_attempts: int) -> None:
        self._logger.info(
            "session_controller_stopped",
            pending_attempts=pending_attempts,
            **self._get_context_kwargs(),
        )

    def resolution_started(self, principal_id: str, email: str, generation: int) -> None:
        self._logger.debug(
            "session_resolution_started",
            principal_id=principal_id,
            email=email,
            generation=generation,
            **self._get_context_kwargs(),
        )

    def session_resolved(
        self,
        principal_id: str,
        status: str,
        tenant_id: str | None,
        role: str | None,
    ) -> None:
        self._logger.info(
            "session_resolved",
            principal_id=principal_id,
            status=status,
            tenant_id=tenant_id,
            role=role,
            **self._get_context_kwargs(),
        )

    def access_denied(self, principal_id: str, email: str) -> None:
        self._logger.warning(
            "access_denied",
            principal_id=principal_id,
            email=email,
            **self._get_context_kwargs(),
        )

    def resolution_failed(self, principal_id: str, error: str) -> None:
        self._logger.error(
            "session_resolution_failed",
            principal_id=principal_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def stale_resolution_discarded(self, generation: int, current_generation: int) -> None:
        self._logger.debug(
            "stale_resolution_discarded",
            generation=generation,
            current_generation=current_generation,
            **self._get_context_kwargs(),
        )

    def session_cleared(self) -> None:
        self._logger.info("session_cleared", **self._get_context_kwargs())

    def profile_bookkeeping_failed(self, principal_id: str, error: str) -> None:
        self._logger.warning(
            "profile_bookkeeping_failed",
            principal_id=principal_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def tenant_lookup_failed(self, tenant_id: str, error: str) -> None:
        self._logger.warning(
            "tenant_lookup_failed",
            tenant_id=tenant_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def sign_out_failed(self, error: str) -> None:
        self._logger.error(
            "identity_sign_out_failed",
            error=error,
            **self._get_context_kwargs(),
        )

    def tenant_assigned(self, principal_id: str, tenant_id: str, role: str) -> None:
        self._logger.info(
            "tenant_assigned",
            principal_id=principal_id,
            tenant_id=tenant_id,
            role=role,
            **self._get_context_kwargs(),
        )

    def tenant_assignment_failed(self, principal_id: str | None, tenant_id: str, error: str) -> None:
        self._logger.error(
            "tenant_assignment_failed",
            principal_id=principal_id,
            tenant_id=tenant_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def session_listener_failed(self, status: str, error: str) -> None:
        self._logger.error(
            "session_listener_failed",
            status=status,
            error=error,
            **self._get_context_kwargs(),
        )
