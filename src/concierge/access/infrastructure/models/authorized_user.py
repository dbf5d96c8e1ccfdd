"""SQLAlchemy ORM model for the authorized_users table (the allowlist).

Rows are maintained by administrative tooling; the access context only
reads them.
"""

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class AuthorizedUserModel(Base, TimestampMixin):
    """ORM model for authorized_users table.

    ``id`` is the lowercased email for rows created with the keyed
    convention. Legacy rows carry an arbitrary id and are only reachable
    through the ``email`` column.
    """

    __tablename__ = "authorized_users"

    id: Mapped[str] = mapped_column(String(320), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    company_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str | None] = mapped_column(String(64), nullable=True)
    permissions: Mapped[dict[str, Any] | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<AuthorizedUserModel(id={self.id}, email={self.email}, role={self.role})>"
