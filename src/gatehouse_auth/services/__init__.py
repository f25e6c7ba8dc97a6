"""Authentication services.

Provides password hashing, JWT token management and the session lifecycle.
"""

from gatehouse_auth.services.jwt_service import JWTService
from gatehouse_auth.services.password_service import PasswordHashingService
from gatehouse_auth.services.session_service import (
    SessionResult,
    SessionService,
    ValidatedSession,
    parse_user_agent,
)

__all__ = [
    "PasswordHashingService",
    "JWTService",
    "SessionService",
    "SessionResult",
    "ValidatedSession",
    "parse_user_agent",
]
