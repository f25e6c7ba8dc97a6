"""Identity domain.

This domain handles:
- Identity aggregate (credentials, profile, lockout and one-time secrets)
- Auth entities: the kinds of principal, one table each
- Email normalization
"""

from gatehouse_identity.domain.identity.aggregates import Identity
from gatehouse_identity.domain.identity.repositories import IdentityRepository
from gatehouse_identity.domain.identity.value_objects import (
    AuthEntity,
    Email,
    IdentityStatus,
)

__all__ = [
    "AuthEntity",
    "Email",
    "Identity",
    "IdentityRepository",
    "IdentityStatus",
]
