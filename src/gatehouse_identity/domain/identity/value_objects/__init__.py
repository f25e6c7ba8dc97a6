from gatehouse_identity.domain.identity.value_objects.auth_entity import AuthEntity
from gatehouse_identity.domain.identity.value_objects.email import Email
from gatehouse_identity.domain.identity.value_objects.identity_status import (
    IdentityStatus,
)

__all__ = [
    "AuthEntity",
    "Email",
    "IdentityStatus",
]
