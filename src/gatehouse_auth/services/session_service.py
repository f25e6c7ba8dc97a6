"""Session service.

Owns the session lifecycle for every auth entity: at most one active
session per (email, auth entity) pair, token issuance bound to the
session id, refresh with rotation, and soft logout.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from gatehouse_auth.exceptions import (
    AuthError,
    SessionEntityMismatchError,
    SessionNotFoundError,
)
from gatehouse_auth.repositories import SessionRepository, SessionStats
from gatehouse_auth.schemas import TokenClaims, TokenPair, TokenType
from gatehouse_auth.services.jwt_service import JWTService
from gatehouse_auth.session import DeviceInfo, Session, SessionView

logger = logging.getLogger(__name__)

_TABLET_PATTERN = re.compile(r"iPad|Tablet")
_MOBILE_PATTERN = re.compile(r"Mobile|Android|iPhone|iPad")
_BROWSERS = ("Chrome", "Firefox", "Safari", "Edge")


@dataclass(frozen=True)
class SessionResult:
    """A stored session together with the tokens bound to it."""

    session: Session
    tokens: TokenPair


@dataclass(frozen=True)
class ValidatedSession:
    """Outcome of a successful access token check."""

    session: Session
    claims: TokenClaims


def parse_user_agent(user_agent: str | None) -> tuple[str, str]:
    """Derive ``(device_name, device_type)`` from a user-agent string."""
    if not user_agent:
        return "Unknown", "desktop"

    if _TABLET_PATTERN.search(user_agent):
        device_type = "tablet"
    elif _MOBILE_PATTERN.search(user_agent):
        device_type = "mobile"
    else:
        device_type = "desktop"

    device_name = next(
        (browser for browser in _BROWSERS if browser in user_agent),
        "Unknown",
    )
    return device_name, device_type


def _normalize_email(email: str) -> str:
    return email.lower().strip()


class SessionService:
    """
    Application service for the session lifecycle.

    Combines the session store with the token issuer. Validation methods
    never raise for token or session problems; they return None.
    """

    def __init__(
        self,
        session_repository: SessionRepository,
        jwt_service: JWTService,
    ):
        self._repo = session_repository
        self._jwt_service = jwt_service

    async def create_session(  # noqa: PLR0913
        self,
        identity_id: UUID,
        email: str,
        auth_entity: str,
        device: DeviceInfo | None = None,
        role: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> SessionResult:
        """
        Open a new session, replacing any active one for the pair.

        Parameters
        ----------
        identity_id
            The identity the session belongs to
        email
            The identity's email; normalized before use
        auth_entity
            The auth entity the identity was authenticated against
        device
            Optional client details
        role
            Optional role claim embedded in both tokens
        metadata
            Free-form data stored with the session

        Returns
        -------
        SessionResult whose session id equals the ``sessionId`` claim of
        both tokens
        """
        email = _normalize_email(email)
        await self._repo.deactivate_all_for_email_in_entity(email, auth_entity)

        session_id = uuid.uuid4()
        tokens = self._jwt_service.create_token_pair(
            identity_id=identity_id,
            session_id=session_id,
            email=email,
            auth_entity=auth_entity,
            role=role,
        )
        session = Session.open(
            session_id=session_id,
            identity_id=identity_id,
            email=email,
            auth_entity=auth_entity,
            tokens=tokens,
            role=role,
            device=device,
            metadata=metadata,
        )
        stored = await self._repo.create(session)

        logger.info("Session created: %s for %s (%s)", stored.id, email, auth_entity)
        return SessionResult(session=stored, tokens=tokens)

    async def create_session_with_device_detection(  # noqa: PLR0913
        self,
        identity_id: UUID,
        email: str,
        auth_entity: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
        role: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> SessionResult:
        """Open a session with device name and type parsed from the user agent."""
        device_name, device_type = parse_user_agent(user_agent)
        device = DeviceInfo(
            ip_address=ip_address,
            user_agent=user_agent,
            device_name=device_name,
            device_type=device_type,
        )
        return await self.create_session(
            identity_id=identity_id,
            email=email,
            auth_entity=auth_entity,
            device=device,
            role=role,
            metadata=metadata,
        )

    async def validate_session(
        self,
        session_id: UUID,
        auth_entity: str,
    ) -> Session | None:
        """
        Return the session if it is active, unexpired and of ``auth_entity``.

        An expired session found here is deactivated.
        """
        session = await self._repo.find_active_by_id(session_id)
        if session is None or session.auth_entity != auth_entity:
            return None

        if session.is_expired():
            await self._repo.deactivate(session.id)
            logger.debug("Expired session %s deactivated on validation", session.id)
            return None

        return session

    async def validate_token_and_session(self, token: str) -> ValidatedSession | None:
        """
        Check an access token against its live session.

        Returns
        -------
        ValidatedSession, or None if the token is invalid, not an access
        token, or its session is missing, inactive or does not match the
        claims
        """
        try:
            claims = self._jwt_service.verify_token(token)
        except AuthError:
            return None

        if claims.token_type != TokenType.ACCESS:
            return None

        session = await self.validate_session(claims.session_id, claims.auth_entity)
        if session is None:
            return None

        if session.email != claims.email or session.identity_id != claims.identity_id:
            return None

        await self._repo.update_activity(session.id)
        return ValidatedSession(session=session, claims=claims)

    async def refresh_tokens(
        self,
        refresh_token: str,
        auth_entity: str | None = None,
    ) -> SessionResult | None:
        """
        Rotate both tokens of the session that owns ``refresh_token``.

        The presented refresh token stops working once this returns. With
        ``auth_entity`` given, sessions of other entities are left untouched
        and rejected.
        """
        try:
            claims = self._jwt_service.verify_token(refresh_token)
        except AuthError:
            return None

        if claims.token_type != TokenType.REFRESH:
            return None

        session = await self._repo.find_by_refresh_token(refresh_token)
        if session is None or not session.is_active:
            return None
        if not session.is_refresh_token_valid():
            return None
        if auth_entity is not None and session.auth_entity != auth_entity:
            return None

        tokens = self._jwt_service.create_token_pair(
            identity_id=session.identity_id,
            session_id=session.id,
            email=session.email,
            auth_entity=session.auth_entity,
            role=session.role,
        )
        session.rotate_tokens(tokens)
        await self._repo.update_tokens(
            session.id,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            access_expires_at=tokens.access_expires_at,
            refresh_expires_at=tokens.refresh_expires_at,
        )

        updated = await self._repo.find_by_id(session.id)
        if updated is None:
            return None

        logger.debug("Tokens refreshed for session %s", session.id)
        return SessionResult(session=updated, tokens=tokens)

    async def logout(self, session_id: UUID) -> bool:
        await self._repo.deactivate(session_id)
        logger.info("Session logged out: %s", session_id)
        return True

    async def logout_entity(self, email: str, auth_entity: str) -> bool:
        email = _normalize_email(email)
        await self._repo.deactivate_all_for_email_in_entity(email, auth_entity)
        logger.info("Logged out %s from %s", email, auth_entity)
        return True

    async def logout_all_entities(self, email: str) -> bool:
        email = _normalize_email(email)
        await self._repo.deactivate_all_for_email(email)
        logger.info("Logged out %s from all entities", email)
        return True

    # -- Queries -------------------------------------------------------------

    async def has_active_session(self, email: str, auth_entity: str) -> bool:
        return await self._repo.has_active_session(_normalize_email(email), auth_entity)

    async def get_active_session(self, email: str, auth_entity: str) -> Session | None:
        return await self._repo.find_active_by_email_and_entity(
            _normalize_email(email),
            auth_entity,
        )

    async def get_active_sessions_for_user(self, email: str) -> list[Session]:
        return await self._repo.list_active_for_email(_normalize_email(email))

    async def get_sessions_by_entity(
        self,
        email: str,
        auth_entity: str,
    ) -> list[Session]:
        return await self._repo.list_active_for_email_in_entity(
            _normalize_email(email),
            auth_entity,
        )

    async def update_activity(
        self,
        session_id: UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        await self._repo.update_activity(session_id, ip_address, user_agent)

    async def check_token_refresh_needed(
        self,
        session_id: UUID,
        minutes_before: int = 15,
    ) -> bool:
        """True when the session's access token expires within the window.

        Missing or inactive sessions report False.
        """
        session = await self._repo.find_active_by_id(session_id)
        if session is None:
            return False
        return session.needs_token_refresh(minutes_before)

    async def validate_session_ownership(
        self,
        session_id: UUID,
        email: str,
        auth_entity: str,
    ) -> bool:
        return await self._repo.is_owned_by(
            session_id,
            _normalize_email(email),
            auth_entity,
        )

    async def get_session_view(self, session_id: UUID) -> SessionView | None:
        session = await self._repo.find_by_id(session_id)
        return session.to_view() if session else None

    async def require_session(self, session_id: UUID, auth_entity: str) -> Session:
        """
        Load a session of ``auth_entity`` or raise.

        Unlike the validation methods this reports why the lookup failed;
        use it where the caller already holds an authenticated context.

        Raises
        ------
        SessionNotFoundError
            If no session has this id
        SessionEntityMismatchError
            If the session belongs to another auth entity
        """
        session = await self._repo.find_by_id(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        if session.auth_entity != auth_entity:
            raise SessionEntityMismatchError(auth_entity, session.auth_entity)
        return session

    # -- Maintenance ---------------------------------------------------------

    async def get_session_stats(self, auth_entity: str | None = None) -> SessionStats:
        return await self._repo.stats(auth_entity)

    async def count_active_sessions_by_entity(self, auth_entity: str) -> int:
        return await self._repo.count_active_by_entity(auth_entity)

    async def purge_expired_sessions(self) -> int:
        return await self._repo.purge_expired()

    async def purge_inactive_sessions(self, days_old: int = 30) -> int:
        return await self._repo.purge_inactive_older_than(days_old)
