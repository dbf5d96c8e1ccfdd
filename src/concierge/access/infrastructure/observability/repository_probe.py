"""Domain probe for directory store repository operations.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events related to allowlist, profile, and company
persistence operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AllowlistRepositoryProbe(Protocol):
    """Domain probe for allowlist repository operations."""

    def record_retrieved(self, key: str) -> None:
        """Record that an allowlist entry was found by its key."""
        ...

    def record_not_found(self, key: str) -> None:
        """Record that no allowlist entry has the given key."""
        ...

    def email_scanned(self, email: str, match_count: int) -> None:
        """Record the result of an equality scan on the email column."""
        ...

    def read_failed(self, operation: str, error: str) -> None:
        """Record that a read against the allowlist failed."""
        ...

    def with_context(self, context: ObservationContext) -> AllowlistRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class UserProfileRepositoryProbe(Protocol):
    """Domain probe for profile repository operations."""

    def profile_retrieved(self, principal_id: str) -> None:
        """Record that a profile was retrieved."""
        ...

    def profile_not_found(self, principal_id: str) -> None:
        """Record that no profile exists for a principal."""
        ...

    def profile_merged(self, principal_id: str, fields: list[str], created: bool) -> None:
        """Record that a patch was merged into a profile row."""
        ...

    def read_failed(self, operation: str, error: str) -> None:
        """Record that a profile read failed."""
        ...

    def write_failed(self, principal_id: str, error: str) -> None:
        """Record that a profile merge-write failed."""
        ...

    def with_context(self, context: ObservationContext) -> UserProfileRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class TenantRepositoryProbe(Protocol):
    """Domain probe for company repository operations."""

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a company was retrieved."""
        ...

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a company was not found."""
        ...

    def tenants_queried(self, operation: str, count: int) -> None:
        """Record the result size of a company query."""
        ...

    def read_failed(self, operation: str, error: str) -> None:
        """Record that a company read failed."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAllowlistRepositoryProbe:
    """Default implementation of AllowlistRepositoryProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAllowlistRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultAllowlistRepositoryProbe(logger=self._logger, context=context)

    def record_retrieved(self, key: str) -> None:
        """Record that an allowlist entry was found by its key."""
        self._logger.debug(
            "allowlist_record_retrieved",
            key=key,
            **self._get_context_kwargs(),
        )

    def record_not_found(self, key: str) -> None:
        """Record that no allowlist entry has the given key."""
        self._logger.debug(
            "allowlist_record_not_found",
            key=key,
            **self._get_context_kwargs(),
        )

    def email_scanned(self, email: str, match_count: int) -> None:
        """Record the result of an equality scan on the email column."""
        self._logger.debug(
            "allowlist_email_scanned",
            email=email,
            match_count=match_count,
            **self._get_context_kwargs(),
        )

    def read_failed(self, operation: str, error: str) -> None:
        """Record that a read against the allowlist failed."""
        self._logger.error(
            "allowlist_read_failed",
            operation=operation,
            error=error,
            **self._get_context_kwargs(),
        )


class DefaultUserProfileRepositoryProbe:
    """Default implementation of UserProfileRepositoryProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultUserProfileRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserProfileRepositoryProbe(logger=self._logger, context=context)

    def profile_retrieved(self, principal_id: str) -> None:
        """Record that a profile was retrieved."""
        self._logger.debug(
            "profile_retrieved",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def profile_not_found(self, principal_id: str) -> None:
        """Record that no profile exists for a principal."""
        self._logger.debug(
            "profile_not_found",
            principal_id=principal_id,
            **self._get_context_kwargs(),
        )

    def profile_merged(self, principal_id: str, fields: list[str], created: bool) -> None:
        """Record that a patch was merged into a profile row."""
        self._logger.info(
            "profile_merged",
            principal_id=principal_id,
            fields=fields,
            created=created,
            **self._get_context_kwargs(),
        )

    def read_failed(self, operation: str, error: str) -> None:
        """Record that a profile read failed."""
        self._logger.error(
            "profile_read_failed",
            operation=operation,
            error=error,
            **self._get_context_kwargs(),
        )

    def write_failed(self, principal_id: str, error: str) -> None:
        """Record that a profile merge-write failed."""
        self._logger.error(
            "profile_merge_failed",
            principal_id=principal_id,
            error=error,
            **self._get_context_kwargs(),
        )


class DefaultTenantRepositoryProbe:
    """Default implementation of TenantRepositoryProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultTenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantRepositoryProbe(logger=self._logger, context=context)

    def tenant_retrieved(self, tenant_id: str) -> None:
        """Record that a company was retrieved."""
        self._logger.debug(
            "company_retrieved",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenant_not_found(self, tenant_id: str) -> None:
        """Record that a company was not found."""
        self._logger.debug(
            "company_not_found",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def tenants_queried(self, operation: str, count: int) -> None:
        """Record the result size of a company query."""
        self._logger.debug(
            "companies_queried",
            operation=operation,
            count=count,
            **self._get_context_kwargs(),
        )

    def read_failed(self, operation: str, error: str) -> None:
        """Record that a company read failed."""
        self._logger.error(
            "company_read_failed",
            operation=operation,
            error=error,
            **self._get_context_kwargs(),
        )
