"""Gatehouse Auth - Generic authentication infrastructure.

This package provides authentication infrastructure that is independent
of any specific identity table. It handles:
- Password hashing and strength scoring (bcrypt)
- JWT token creation and verification
- Sessions shared by every auth entity (with pluggable persistence)

Architecture:
    gatehouse_auth/
    ├── services/           # Password hashing, JWT, session lifecycle
    ├── repositories/       # Abstract interfaces
    ├── persistence/        # Implementations by technology
    │   └── sqlalchemy/     # SQLAlchemy implementation
    ├── session.py          # Session entity
    ├── schemas.py          # Data classes
    └── exceptions.py       # Auth exceptions

Usage:
    # Import core services and interfaces
    from gatehouse_auth import PasswordHashingService, JWTService, SessionService

    # Import SQLAlchemy implementation
    from gatehouse_auth.persistence.sqlalchemy import (
        SessionRepositorySQLAlchemy,
        SessionModel,
        AuthBase,
    )
"""

from gatehouse_auth.exceptions import (
    AccountLockedError,
    AccountNotActiveError,
    AuthError,
    ConfigurationError,
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidTokenError,
    SessionEntityMismatchError,
    SessionNotActiveError,
    SessionNotFoundError,
    WeakPasswordError,
)
from gatehouse_auth.repositories import SessionRepository, SessionStats
from gatehouse_auth.schemas import (
    HashInfo,
    PasswordStrength,
    TokenClaims,
    TokenPair,
    TokenType,
)
from gatehouse_auth.services import (
    JWTService,
    PasswordHashingService,
    SessionResult,
    SessionService,
    ValidatedSession,
)
from gatehouse_auth.session import DeviceInfo, Session, SessionStatus, SessionView

__all__ = [
    # Services
    "PasswordHashingService",
    "JWTService",
    "SessionService",
    "SessionResult",
    "ValidatedSession",
    # Session entity
    "Session",
    "SessionStatus",
    "SessionView",
    "DeviceInfo",
    # Repositories (interfaces)
    "SessionRepository",
    "SessionStats",
    # Schemas
    "TokenClaims",
    "TokenPair",
    "TokenType",
    "PasswordStrength",
    "HashInfo",
    # Exceptions
    "AuthError",
    "ConfigurationError",
    "InvalidTokenError",
    "ExpiredTokenError",
    "WeakPasswordError",
    "InvalidCredentialsError",
    "AccountLockedError",
    "AccountNotActiveError",
    "SessionNotFoundError",
    "SessionEntityMismatchError",
    "SessionNotActiveError",
]
