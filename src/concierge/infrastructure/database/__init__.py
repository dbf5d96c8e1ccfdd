"""Async SQLAlchemy plumbing for the directory store."""

from infrastructure.database.engines import (
    build_async_url,
    create_directory_engine,
    create_sessionmaker,
)
from infrastructure.database.models import Base, TimestampMixin

__all__ = [
    "Base",
    "TimestampMixin",
    "build_async_url",
    "create_directory_engine",
    "create_sessionmaker",
]
