"""SQLAlchemy implementation for gatehouse_identity persistence.

Provides:
- UserModel, AdminModel, VendorModel: one identity table per auth entity
- IdentityRepositorySQLAlchemy: Repository implementation bound to one table
- init_db: engine, session factory and schema helpers
"""

from gatehouse_identity.infrastructure.persistence.sqlalchemy.models import (
    AdminModel,
    IdentityColumnsMixin,
    UserModel,
    VendorModel,
)
from gatehouse_identity.infrastructure.persistence.sqlalchemy.repositories import (
    IdentityRepositorySQLAlchemy,
)

__all__ = [
    "AdminModel",
    "IdentityColumnsMixin",
    "IdentityRepositorySQLAlchemy",
    "UserModel",
    "VendorModel",
]
