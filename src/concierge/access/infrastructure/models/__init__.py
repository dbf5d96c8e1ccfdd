"""SQLAlchemy ORM models for the directory store collections."""

from access.infrastructure.models.authorized_user import AuthorizedUserModel
from access.infrastructure.models.company import CompanyModel
from access.infrastructure.models.user_profile import UserProfileModel

__all__ = [
    "AuthorizedUserModel",
    "CompanyModel",
    "UserProfileModel",
]
