"""Protocol for allowlist resolution observability.

Defines the interface for domain probes that capture how an email was
(or was not) matched against the allowlist.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AllowlistResolverProbe(Protocol):
    """Domain probe for allowlist resolution."""

    def strategy_missed(self, strategy: str, email: str) -> None:
        """Record that a lookup strategy found nothing."""
        ...

    def allowlist_resolved(
        self,
        email: str,
        source: str,
        tenant_id: str | None,
        role: str | None,
    ) -> None:
        """Record that an email was authorized."""
        ...

    def allowlist_denied(self, email: str) -> None:
        """Record that no strategy authorized an email."""
        ...

    def allowlist_lookup_failed(self, email: str, strategy: str, error: str) -> None:
        """Record that a store read failed during resolution."""
        ...

    def with_context(self, context: ObservationContext) -> AllowlistResolverProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAllowlistResolverProbe:
    """Default implementation of AllowlistResolverProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAllowlistResolverProbe:
        """Create a new probe with observation context bound."""
        return DefaultAllowlistResolverProbe(logger=self._logger, context=context)

    def strategy_missed(self, strategy: str, email: str) -> None:
        """Record that a lookup strategy found nothing."""
        self._logger.debug(
            "allowlist_strategy_missed",
            strategy=strategy,
            email=email,
            **self._get_context_kwargs(),
        )

    def allowlist_resolved(
        self,
        email: str,
        source: str,
        tenant_id: str | None,
        role: str | None,
    ) -> None:
        """Record that an email was authorized."""
        self._logger.info(
            "allowlist_resolved",
            email=email,
            source=source,
            tenant_id=tenant_id,
            role=role,
            **self._get_context_kwargs(),
        )

    def allowlist_denied(self, email: str) -> None:
        """Record that no strategy authorized an email."""
        self._logger.warning(
            "allowlist_denied",
            email=email,
            **self._get_context_kwargs(),
        )

    def allowlist_lookup_failed(self, email: str, strategy: str, error: str) -> None:
        """Record that a store read failed during resolution."""
        self._logger.error(
            "allowlist_lookup_failed",
            email=email,
            strategy=strategy,
            error=error,
            **self._get_context_kwargs(),
        )
