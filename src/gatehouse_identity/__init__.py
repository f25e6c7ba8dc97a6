"""Gatehouse Identity - Identities per auth entity and their authentication.

This package handles:
- Identity aggregate and one table per auth entity (users, admins, vendors)
- Entity resolution at startup
- Registration, login with lockout, logout and token validation
- Password reset, password change and email verification
- Operational CLI

Generic session and token infrastructure lives in gatehouse_auth.
"""

from gatehouse_identity.application.dtos import (
    AuthenticatedIdentity,
    IdentityProfile,
    LoginData,
    LoginResult,
    ModuleInfo,
    RegistrationData,
    RegistrationResult,
)
from gatehouse_identity.application.entity_resolver import (
    EntityRegistration,
    EntityResolver,
    ResolvedAuthEntity,
)
from gatehouse_identity.application.factories import AuthServiceFactory
from gatehouse_identity.application.ports import IdentityNotifier
from gatehouse_identity.application.services import AuthenticationService
from gatehouse_identity.domain.identity import (
    AuthEntity,
    Email,
    Identity,
    IdentityRepository,
    IdentityStatus,
)
from gatehouse_identity.exceptions import (
    EmailAlreadyRegisteredError,
    IdentityNotFoundError,
    InvalidEmailError,
    InvalidResetTokenError,
    InvalidVerificationCodeError,
    UsernameTakenError,
)
from gatehouse_identity.schemas import IdentityView

__all__ = [
    # Domain
    "AuthEntity",
    "Email",
    "Identity",
    "IdentityRepository",
    "IdentityStatus",
    # Exceptions
    "EmailAlreadyRegisteredError",
    "IdentityNotFoundError",
    "InvalidEmailError",
    "InvalidResetTokenError",
    "InvalidVerificationCodeError",
    "UsernameTakenError",
    # Schemas and DTOs
    "IdentityView",
    "AuthenticatedIdentity",
    "IdentityProfile",
    "LoginData",
    "LoginResult",
    "ModuleInfo",
    "RegistrationData",
    "RegistrationResult",
    # Entity resolution
    "EntityRegistration",
    "EntityResolver",
    "ResolvedAuthEntity",
    # Application
    "AuthServiceFactory",
    "AuthenticationService",
    "IdentityNotifier",
]
