"""create directory tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-17 09:12:44.103512

Creates the three directory store collections: the allowlist
(authorized_users), per-principal profiles (user_profiles) and the company
directory (companies). Profiles reference companies loosely: legacy rows
may hold a company name in company_id, so no foreign key is declared.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3f1c9a7d2b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create authorized_users, user_profiles and companies."""
    op.create_table(
        "companies",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("contact_email", sa.String(320), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_companies_name", "companies", ["name"])
    op.create_index("ix_companies_contact_email", "companies", ["contact_email"])

    op.create_table(
        "authorized_users",
        sa.Column("id", sa.String(320), primary_key=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("company_id", sa.String(255), nullable=True),
        sa.Column("company_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(64), nullable=True),
        sa.Column("permissions", sa.JSON, nullable=True),
        *_timestamps(),
    )
    # Legacy rows are only reachable through the email scan
    op.create_index("ix_authorized_users_email", "authorized_users", ["email"])

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("email", sa.String(320), nullable=True),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.String(2048), nullable=True),
        sa.Column("company_id", sa.String(255), nullable=True),
        sa.Column("company_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(64), nullable=True),
        sa.Column("permissions", sa.JSON, nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    """Drop the directory tables."""
    op.drop_table("user_profiles")
    op.drop_index("ix_authorized_users_email", table_name="authorized_users")
    op.drop_table("authorized_users")
    op.drop_index("ix_companies_contact_email", table_name="companies")
    op.drop_index("ix_companies_name", table_name="companies")
    op.drop_table("companies")
