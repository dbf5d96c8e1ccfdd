"""Protocol for profile reconciliation observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ProfileReconcilerProbe(Protocol):
    """Domain probe for profile reconciliation."""

    def profile_created(self, principal_id: str, fields: list[str]) -> None:
        """Record that a profile document was created."""
        ...

    def profile_patched(
        self,
        principal_id: str,
        fields: list[str],
        overridden: list[str],
    ) -> None:
        """Record that an existing profile was patched.

        ``overridden`` lists fields whose stored value disagreed with the
        allowlist and was replaced.
        """
        ...

    def profile_unchanged(self, principal_id: str) -> None:
        """Record that reconciliation found nothing to write."""
        ...

    def profile_write_failed(
        self, principal_id: str, fields: list[str], error: str
    ) -> None:
        """Record that the merge-write failed (non-fatal)."""
        ...

    def with_context(self, context: ObservationContext) -> ProfileReconcilerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultProfileReconcilerProbe:
    """Default implementation of ProfileReconcilerProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultProfileReconcilerProbe:
        """Create a new probe with observation context bound."""
        return DefaultProfileReconcilerProbe(logger=self._logger, context=context)

    def profile_created(self, principal_id: str, fields: list[str]) -> None:
        self._logger.info(
            "profile_created",
            principal_id=principal_id,
            fields=fields,
            **self._get_context_kwargs(),
        )

    def profile_patched(
        self,
        principal_id: str,
        fields: list[str],
        overridden: list[str],
    ) -> None:
        self._logger.info(
            "profile_patched",
            principal_id=principal_id,
            fields=fields,
            overridden=overridden,
            **self._get_context_kwargs(),
        )

    def profile_unchanged(self, principal_id: str) -> None:
        self._logger.debug(
            "profile_unchanged",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def profile_write_failed(
        self, principal_id: str, fields: list[str], error: str
    ) -> None:
        self._logger.warning(
            "profile_write_failed",
            principal_id=principal_id,
            fields=fields,
            error=error,
            **self._get_context_kwargs(),
        )
