"""Protocol for company directory observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantDirectoryProbe(Protocol):
    """Domain probe for company directory lookups."""

    def tenants_listed(self, count: int) -> None:
        """Record that the company list was retrieved."""
        ...

    def tenant_resolved(self, identifier: str, tenant_id: str, resolved_from: str) -> None:
        """Record that an identifier was matched to a company."""
        ...

    def tenant_unresolved(self, identifier: str) -> None:
        """Record that no company matched an identifier."""
        ...

    def with_context(self, context: ObservationContext) -> TenantDirectoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantDirectoryProbe:
    """Default implementation of TenantDirectoryProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantDirectoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantDirectoryProbe(logger=self._logger, context=context)

    def tenants_listed(self, count: int) -> None:
        self._logger.info(
            "tenants_listed",
            count=count,
            **self._get_context_kwargs(),
        )

    def tenant_resolved(self, identifier: str, tenant_id: str, resolved_from: str) -> None:
        # Anything but an id match points at a legacy record storing a name
        log = self._logger.info if resolved_from == "id" else self._logger.warning
        log(
            "tenant_resolved",
            identifier=identifier,
            resolved_tenant_id=tenant_id,
            resolved_from=resolved_from,
            **self._get_context_kwargs(),
        )

    def tenant_unresolved(self, identifier: str) -> None:
        self._logger.warning(
            "tenant_unresolved",
            identifier=identifier,
            **self._get_context_kwargs(),
        )
