"""JWT token service.

Issues and verifies the signed access/refresh tokens that are bound to a
session record.
"""

from __future__ import annotations

import secrets
from datetime import timedelta
from uuid import UUID

import jwt

from gatehouse_auth.exceptions import (
    ConfigurationError,
    ExpiredTokenError,
    InvalidTokenError,
)
from gatehouse_auth.schemas import TokenClaims, TokenPair, TokenType
from gatehouse_auth.time import utc_now


class JWTService:
    """Service for JWT token creation and verification.

    Handles access tokens (short-lived) and refresh tokens (long-lived).
    Every token embeds the session it belongs to; the issuer does not
    check the ``type`` claim on verification, callers must.

    Examples
    --------
    >>> service = JWTService(secret_key="your-secret-key")
    >>> pair = service.create_token_pair(user_id, session_id, "a@x.com", "users")
    >>> claims = service.verify_token(pair.access_token)
    >>> print(claims.session_id)
    """

    DEFAULT_ACCESS_EXPIRE_MINUTES = 60
    DEFAULT_REFRESH_EXPIRE_DAYS = 7
    ALGORITHM = "HS256"

    def __init__(
        self,
        secret_key: str,
        access_token_expire_minutes: int = DEFAULT_ACCESS_EXPIRE_MINUTES,
        refresh_token_expire_days: int = DEFAULT_REFRESH_EXPIRE_DAYS,
    ):
        """Initialize the JWT service.

        Parameters
        ----------
        secret_key
            Secret key for signing tokens. Must be kept secure.
        access_token_expire_minutes
            Minutes until access token expires (default 60)
        refresh_token_expire_days
            Days until refresh token expires (default 7)
        """
        if not secret_key:
            msg = "JWT secret key cannot be empty"
            raise ConfigurationError(msg)

        self._secret_key = secret_key
        self._access_expire = timedelta(minutes=access_token_expire_minutes)
        self._refresh_expire = timedelta(days=refresh_token_expire_days)

    @property
    def access_token_lifetime(self) -> timedelta:
        return self._access_expire

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return self._refresh_expire

    def create_access_token(  # noqa: PLR0913
        self,
        identity_id: UUID,
        session_id: UUID,
        email: str,
        auth_entity: str,
        role: str | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a short-lived access token.

        Parameters
        ----------
        identity_id
            The identity's unique identifier
        session_id
            The session the token is bound to
        email
            The identity's email address
        auth_entity
            The auth entity tag ("users", "admins", ...)
        role
            Optional role claim
        expires_delta
            Custom expiration time (optional)

        Returns
        -------
        The encoded JWT token string
        """
        now = utc_now()
        return self._encode(
            TokenClaims(
                identity_id=identity_id,
                session_id=session_id,
                auth_entity=auth_entity,
                token_type=TokenType.ACCESS,
                issued_at=now,
                expires_at=now + (expires_delta or self._access_expire),
                email=email,
                role=role,
                jti=secrets.token_hex(8),
            ),
        )

    def create_refresh_token(
        self,
        identity_id: UUID,
        session_id: UUID,
        auth_entity: str,
        role: str | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a long-lived refresh token.

        Refresh tokens are only good for minting a new pair; they carry no
        email claim.
        """
        now = utc_now()
        return self._encode(
            TokenClaims(
                identity_id=identity_id,
                session_id=session_id,
                auth_entity=auth_entity,
                token_type=TokenType.REFRESH,
                issued_at=now,
                expires_at=now + (expires_delta or self._refresh_expire),
                role=role,
                jti=secrets.token_hex(8),
            ),
        )

    def create_token_pair(
        self,
        identity_id: UUID,
        session_id: UUID,
        email: str,
        auth_entity: str,
        role: str | None = None,
    ) -> TokenPair:
        """Issue an access and a refresh token for the same session.

        Both expiries are computed from a single instant.
        """
        now = utc_now()
        access_expires_at = now + self._access_expire
        refresh_expires_at = now + self._refresh_expire

        access_token = self._encode(
            TokenClaims(
                identity_id=identity_id,
                session_id=session_id,
                auth_entity=auth_entity,
                token_type=TokenType.ACCESS,
                issued_at=now,
                expires_at=access_expires_at,
                email=email,
                role=role,
                jti=secrets.token_hex(8),
            ),
        )
        refresh_token = self._encode(
            TokenClaims(
                identity_id=identity_id,
                session_id=session_id,
                auth_entity=auth_entity,
                token_type=TokenType.REFRESH,
                issued_at=now,
                expires_at=refresh_expires_at,
                role=role,
                jti=secrets.token_hex(8),
            ),
        )

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_at=access_expires_at,
            refresh_expires_at=refresh_expires_at,
        )

    def verify_token(self, token: str) -> TokenClaims:
        """Verify and decode a JWT token.

        Parameters
        ----------
        token
            The JWT token string to verify

        Returns
        -------
        TokenClaims containing the decoded data

        Raises
        ------
        ExpiredTokenError
            If the token is past its expiry
        InvalidTokenError
            If token is invalid or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.ALGORITHM],
                options={"require": ["exp", "iat", "sub"]},
            )
            return TokenClaims.from_payload(payload)

        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e
        except (KeyError, ValueError, TypeError) as e:
            raise InvalidTokenError(f"Malformed token payload: {e}") from e

    def decode_unverified(self, token: str) -> TokenClaims | None:
        """Decode a token without checking signature or expiry.

        Only for non-authoritative inspection such as expiry probing.
        """
        try:
            payload = jwt.decode(token, options={"verify_signature": False})
            return TokenClaims.from_payload(payload)
        except (jwt.InvalidTokenError, KeyError, ValueError, TypeError):
            return None

    def is_expired(self, token: str) -> bool:
        """Return True if the token is undecodable or past its expiry."""
        claims = self.decode_unverified(token)
        if claims is None:
            return True
        return claims.is_expired()

    @staticmethod
    def extract_bearer(authorization_header: str | None) -> str | None:
        """Extract the token from an ``Authorization: Bearer <token>`` value."""
        if not authorization_header:
            return None

        parts = authorization_header.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer":
            return None

        return parts[1]

    def _encode(self, claims: TokenClaims) -> str:
        return jwt.encode(
            claims.to_payload(),
            self._secret_key,
            algorithm=self.ALGORITHM,
        )
