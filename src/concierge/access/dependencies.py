"""Dependency wiring for the access bounded context.

Composes infrastructure resources (database engine, directory store
adapters) with access-specific components (resolver, reconciler, session
controller). One SessionController is built per application tab.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from access.application.observability import (
    AllowlistResolverProbe,
    DefaultAllowlistResolverProbe,
    DefaultProfileReconcilerProbe,
    DefaultSessionControllerProbe,
    DefaultTenantDirectoryProbe,
    ProfileReconcilerProbe,
    SessionControllerProbe,
    TenantDirectoryProbe,
)
from access.application.services import (
    AllowlistResolver,
    ProfileReconciler,
    SessionController,
    TenantDirectoryService,
)
from access.application.session_store import SessionStore
from access.infrastructure.allowlist_repository import AllowlistRepository
from access.infrastructure.tenant_repository import TenantRepository
from access.infrastructure.user_profile_repository import UserProfileRepository
from access.ports.identity import IdentityProvider
from access.ports.repositories import (
    IAllowlistRepository,
    ITenantRepository,
    IUserProfileRepository,
)
from infrastructure.database import create_directory_engine, create_sessionmaker
from infrastructure.settings import AccessSettings, get_access_settings, get_database_settings


@dataclass(frozen=True)
class DirectoryRepositories:
    """The three directory store collections, as repository ports."""

    allowlist: IAllowlistRepository
    profiles: IUserProfileRepository
    tenants: ITenantRepository


@lru_cache
def get_directory_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Get the process-wide sessionmaker for the directory store.

    The engine is created lazily from DatabaseSettings on first use.
    """
    settings = get_database_settings()
    engine = create_directory_engine(settings)
    structlog.get_logger().info(
        "directory_engine_created",
        dsn=settings.redacted_dsn,
        pool_size=settings.pool_size,
    )
    return create_sessionmaker(engine)


def get_sql_repositories(
    sessionmaker: async_sessionmaker[AsyncSession] | None = None,
) -> DirectoryRepositories:
    """Get PostgreSQL-backed directory repositories.

    Args:
        sessionmaker: Session factory (the cached process-wide one by default)

    Returns:
        Repositories sharing one session factory
    """
    maker = sessionmaker or get_directory_sessionmaker()
    return DirectoryRepositories(
        allowlist=AllowlistRepository(maker),
        profiles=UserProfileRepository(maker),
        tenants=TenantRepository(maker),
    )


def get_allowlist_resolver_probe() -> AllowlistResolverProbe:
    return DefaultAllowlistResolverProbe()


def get_profile_reconciler_probe() -> ProfileReconcilerProbe:
    return DefaultProfileReconcilerProbe()


def get_session_controller_probe() -> SessionControllerProbe:
    return DefaultSessionControllerProbe()


def get_tenant_directory_probe() -> TenantDirectoryProbe:
    return DefaultTenantDirectoryProbe()


def get_tenant_directory_service(repositories: DirectoryRepositories) -> TenantDirectoryService:
    """Get TenantDirectoryService instance for the company selection view."""
    return TenantDirectoryService(
        tenants=repositories.tenants,
        probe=get_tenant_directory_probe(),
    )


def build_session_controller(
    identity_provider: IdentityProvider,
    repositories: DirectoryRepositories,
    settings: AccessSettings | None = None,
    store: SessionStore | None = None,
) -> SessionController:
    """Build a SessionController with the default strategy chain.

    Args:
        identity_provider: Push-based source of principals
        repositories: Directory store repositories
        settings: Access settings (cached environment settings by default)
        store: Session store to own (a fresh one by default)

    Returns:
        A controller ready to be started
    """
    resolver = AllowlistResolver.with_default_strategies(
        allowlist=repositories.allowlist,
        profiles=repositories.profiles,
        probe=get_allowlist_resolver_probe(),
    )
    reconciler = ProfileReconciler(
        profiles=repositories.profiles,
        probe=get_profile_reconciler_probe(),
    )
    return SessionController(
        identity_provider=identity_provider,
        resolver=resolver,
        reconciler=reconciler,
        profiles=repositories.profiles,
        store=store,
        tenant_directory=get_tenant_directory_service(repositories),
        settings=settings or get_access_settings(),
        probe=get_session_controller_probe(),
    )
