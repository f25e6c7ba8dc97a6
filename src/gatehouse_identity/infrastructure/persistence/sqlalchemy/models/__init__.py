from gatehouse_identity.infrastructure.persistence.sqlalchemy.models.identity_model import (  # noqa: E501
    AdminModel,
    IdentityColumnsMixin,
    UserModel,
    VendorModel,
)

__all__ = [
    "AdminModel",
    "IdentityColumnsMixin",
    "UserModel",
    "VendorModel",
]
