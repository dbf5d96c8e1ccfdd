"""SQLAlchemy ORM model for the user_profiles table.

One row per principal, keyed by the identity provider's id. Rows are
created on first successful authorization and afterwards only patched.
"""

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class UserProfileModel(Base, TimestampMixin):
    """ORM model for user_profiles table.

    Note: id is VARCHAR(255) to accommodate external identity provider ids.
    Every other column is nullable because a profile may predate the
    fields the allowlist later backfills.
    """

    __tablename__ = "user_profiles"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    company_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str | None] = mapped_column(String(64), nullable=True)
    permissions: Mapped[dict[str, Any] | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<UserProfileModel(id={self.id}, email={self.email}, role={self.role})>"
