"""SQLAlchemy ORM model for the companies table."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class CompanyModel(Base, TimestampMixin):
    """ORM model for companies table (read-only for the access context)."""

    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<CompanyModel(id={self.id}, name={self.name})>"
