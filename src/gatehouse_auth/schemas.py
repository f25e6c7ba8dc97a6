"""Auth schemas and data structures.

These are simple data classes used for transferring auth data between
components.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID


class TokenType(str, Enum):
    """Discriminator embedded in every token."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    """Decoded JWT token payload.

    Wire shape::

        {sub, sessionId, email, authEntity, role?, type, iat, exp, jti}

    ``email`` is only present in access tokens.

    Attributes
    ----------
    identity_id
        The identity the token was issued to (``sub``)
    session_id
        The session the token belongs to (``sessionId``)
    auth_entity
        The auth entity tag, e.g. "users" or "admins" (``authEntity``)
    token_type
        Either access or refresh (``type``)
    issued_at
        Issue timestamp (``iat``)
    expires_at
        Expiration timestamp (``exp``)
    """

    identity_id: UUID
    session_id: UUID
    auth_entity: str
    token_type: TokenType
    issued_at: datetime
    expires_at: datetime
    email: str | None = None
    role: str | None = None
    jti: str | None = None

    def is_expired(self) -> bool:
        """Check if the token has expired."""
        return datetime.now(tz=self.expires_at.tzinfo) > self.expires_at

    def is_access_token(self) -> bool:
        return self.token_type == TokenType.ACCESS

    def is_refresh_token(self) -> bool:
        return self.token_type == TokenType.REFRESH

    def to_payload(self) -> dict[str, Any]:
        """Render the claims in their wire shape."""
        payload: dict[str, Any] = {
            "sub": str(self.identity_id),
            "sessionId": str(self.session_id),
            "authEntity": self.auth_entity,
            "type": self.token_type.value,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }
        if self.email is not None:
            payload["email"] = self.email
        if self.role is not None:
            payload["role"] = self.role
        if self.jti is not None:
            payload["jti"] = self.jti
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> TokenClaims:
        """Parse a decoded payload.

        Raises
        ------
        KeyError
            If a required claim is missing
        ValueError
            If a claim has the wrong format
        """
        return cls(
            identity_id=UUID(payload["sub"]),
            session_id=UUID(payload["sessionId"]),
            auth_entity=payload["authEntity"],
            token_type=TokenType(payload["type"]),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            email=payload.get("email"),
            role=payload.get("role"),
            jti=payload.get("jti"),
        )


@dataclass(frozen=True)
class TokenPair:
    """A freshly issued access/refresh pair with their expiries."""

    access_token: str
    refresh_token: str
    access_expires_at: datetime
    refresh_expires_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "access_expires_at": self.access_expires_at.isoformat(),
            "refresh_expires_at": self.refresh_expires_at.isoformat(),
        }


@dataclass(frozen=True)
class PasswordStrength:
    """Result of scoring a password against the strength policy."""

    valid: bool
    score: int
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class HashInfo:
    """Algorithm details extracted from a stored password hash."""

    algorithm: str
    rounds: int
    is_valid: bool
