"""Application services for the access bounded context."""

from access.application.services.allowlist_resolver import (
    AllowlistEmailScan,
    AllowlistResolver,
    AllowlistStrategy,
    KeyedAllowlistLookup,
    ProfileDerivedLookup,
)
from access.application.services.profile_reconciler import (
    ProfileReconciler,
    ReconciliationResult,
)
from access.application.services.session_controller import SessionController
from access.application.services.tenant_directory_service import TenantDirectoryService

__all__ = [
    "AllowlistEmailScan",
    "AllowlistResolver",
    "AllowlistStrategy",
    "KeyedAllowlistLookup",
    "ProfileDerivedLookup",
    "ProfileReconciler",
    "ReconciliationResult",
    "SessionController",
    "TenantDirectoryService",
]
