"""Declarative base and column mixins for the directory tables."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for every directory table.

    ``dict[str, Any]`` annotations map to JSON so free-form documents such
    as permission sets keep their shape.
    """

    type_annotation_map: dict[type, Any] = {
        dict[str, Any]: JSON,
    }


class TimestampMixin:
    """Adds ``created_at`` and ``updated_at``.

    ``created_at`` is set once on insert; merge-writes only move ``updated_at``.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), insert_default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), insert_default=utc_now, onupdate=utc_now, nullable=False
    )
