"""Authentication service for registration, login and credential recovery."""

from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import UUID

from gatehouse_auth import (
    AccountLockedError,
    AccountNotActiveError,
    DeviceInfo,
    InvalidCredentialsError,
    PasswordHashingService,
    PasswordStrength,
    SessionResult,
    SessionService,
    SessionStats,
    SessionView,
    WeakPasswordError,
)
from gatehouse_auth.time import utc_now
from gatehouse_identity.application.dtos import (
    AuthenticatedIdentity,
    IdentityProfile,
    LoginData,
    LoginResult,
    ModuleInfo,
    RegistrationData,
    RegistrationResult,
)
from gatehouse_identity.domain.identity import Email, Identity
from gatehouse_identity.exceptions import (
    EmailAlreadyRegisteredError,
    IdentityNotFoundError,
    InvalidEmailError,
    InvalidResetTokenError,
    InvalidVerificationCodeError,
    UsernameTakenError,
)
from gatehouse_identity.schemas import IdentityView

if TYPE_CHECKING:
    from gatehouse_identity.application.entity_resolver import ResolvedAuthEntity
    from gatehouse_identity.application.ports import IdentityNotifier
    from gatehouse_identity.domain.identity import IdentityRepository

logger = logging.getLogger(__name__)


def _hash_secret(raw: str) -> str:
    return hashlib.sha256(raw.encode()).hexdigest()


class AuthenticationService:
    """
    Application service for identity authentication.

    Orchestrates gatehouse_auth infrastructure (password hashing, sessions)
    with the identity table of a single auth entity to provide:
    - Registration and login with lockout
    - Token validation and refresh
    - Logout (session, entity, global)
    - Password reset, password change and email verification

    One instance is bound to one resolved auth entity for its lifetime.
    """

    def __init__(  # noqa: PLR0913
        self,
        resolved_entity: ResolvedAuthEntity,
        identity_repository: IdentityRepository,
        session_service: SessionService,
        password_service: PasswordHashingService,
        notifier: IdentityNotifier,
        max_login_attempts: int = 5,
        lock_duration_minutes: int = 15,
        reset_token_expire_minutes: int = 60,
        verification_expire_hours: int = 24,
    ):
        self._entity = resolved_entity
        self._identity_repo = identity_repository
        self._session_service = session_service
        self._password_service = password_service
        self._notifier = notifier
        self._max_login_attempts = max_login_attempts
        self._lock_duration_minutes = lock_duration_minutes
        self._reset_token_lifetime = timedelta(minutes=reset_token_expire_minutes)
        self._verification_lifetime = timedelta(hours=verification_expire_hours)

    @property
    def auth_entity(self) -> str:
        return self._entity.name

    async def _find_by_email(self, email: str) -> Identity | None:
        try:
            return await self._identity_repo.find_by_email(email)
        except InvalidEmailError:
            return None

    # -- Registration and login ---------------------------------------------

    async def register(
        self,
        data: RegistrationData,
        device: DeviceInfo | None = None,
    ) -> RegistrationResult:
        """
        Register a new identity in this auth entity.

        Parameters
        ----------
        data
            Email, password and optional profile fields
        device
            Client details; when given, an initial session is opened

        Returns
        -------
        RegistrationResult with the sanitized identity, and the session
        and tokens when ``device`` was supplied

        Raises
        ------
        WeakPasswordError
            If the password fails the strength policy
        InvalidEmailError
            If the email is malformed
        EmailAlreadyRegisteredError
            If the email is already registered in this entity
        UsernameTakenError
            If the username is already taken in this entity
        """
        strength = self._password_service.score_strength(data.password)
        if not strength.valid:
            raise WeakPasswordError(strength.errors)

        email = Email(data.email)
        if await self._identity_repo.email_exists(email):
            raise EmailAlreadyRegisteredError(email.value)

        if data.username and await self._identity_repo.username_exists(data.username):
            raise UsernameTakenError(data.username)

        password_hash = self._password_service.hash(data.password)
        identity = Identity.create(
            email=email,
            password_hash=password_hash,
            auth_entity=self.auth_entity,
            username=data.username,
            first_name=data.first_name,
            last_name=data.last_name,
            extras=self._entity.defaults,
        )
        identity = await self._identity_repo.create(identity)

        session_result: SessionResult | None = None
        if device is not None:
            session_result = await self._session_service.create_session(
                identity_id=identity.id,
                email=identity.email,
                auth_entity=self.auth_entity,
                device=device,
                role=identity.role,
            )

        logger.info("Identity registered: %s (%s)", identity.email, self.auth_entity)
        return RegistrationResult(
            identity=identity.to_view(),
            auth_entity=self.auth_entity,
            password_score=strength.score,
            session=session_result.session.to_view() if session_result else None,
            tokens=session_result.tokens if session_result else None,
        )

    async def login(self, data: LoginData) -> LoginResult:
        """
        Authenticate with email and password and open a new session.

        Any previous session of the identity in this entity is closed.

        Raises
        ------
        InvalidCredentialsError
            If the email is unknown or the password is wrong
        AccountLockedError
            If too many failed attempts locked the account
        AccountNotActiveError
            If the account is inactive or administratively locked
        """
        identity = await self._find_by_email(data.email)
        if identity is None:
            raise InvalidCredentialsError

        if identity.is_locked():
            raise AccountLockedError(identity.lock_minutes_remaining())

        if not identity.is_active:
            raise AccountNotActiveError

        if not self._password_service.verify(data.password, identity.password_hash):
            attempts = await self._identity_repo.increment_login_attempts(
                identity.id,
                self._max_login_attempts,
                self._lock_duration_minutes,
            )
            logger.info(
                "Failed login for %s (%s), attempt %d",
                identity.email,
                self.auth_entity,
                attempts,
            )
            raise InvalidCredentialsError

        await self._identity_repo.record_successful_login(
            identity.id,
            ip_address=data.ip_address,
            user_agent=data.user_agent,
        )

        if data.device_name is None and data.device_type is None and data.user_agent:
            session_result = (
                await self._session_service.create_session_with_device_detection(
                    identity_id=identity.id,
                    email=identity.email,
                    auth_entity=self.auth_entity,
                    user_agent=data.user_agent,
                    ip_address=data.ip_address,
                    role=identity.role,
                )
            )
        else:
            session_result = await self._session_service.create_session(
                identity_id=identity.id,
                email=identity.email,
                auth_entity=self.auth_entity,
                device=data.to_device(),
                role=identity.role,
            )

        refreshed = await self._identity_repo.find_by_id(identity.id)
        identity = refreshed or identity

        logger.info("Identity logged in: %s (%s)", identity.email, self.auth_entity)
        return LoginResult(
            identity=identity.to_view(),
            session=session_result.session.to_view(),
            tokens=session_result.tokens,
            auth_entity=self.auth_entity,
        )

    # -- Logout ---------------------------------------------------------------

    async def logout(self, session_id: UUID) -> bool:
        return await self._session_service.logout(session_id)

    async def logout_entity(self, email: str) -> bool:
        return await self._session_service.logout_entity(email, self.auth_entity)

    async def logout_all_entities(self, email: str) -> bool:
        return await self._session_service.logout_all_entities(email)

    # -- Tokens ---------------------------------------------------------------

    async def validate_token(self, token: str) -> AuthenticatedIdentity | None:
        """Resolve an access token to its identity, or None if unusable."""
        validated = await self._session_service.validate_token_and_session(token)
        if validated is None:
            return None

        session = validated.session
        if session.auth_entity != self.auth_entity:
            return None

        identity = await self._identity_repo.find_by_id(validated.claims.identity_id)
        if identity is None:
            return None

        return AuthenticatedIdentity(
            identity=identity.to_view(),
            session=session.to_view(),
            identity_id=identity.id,
            session_id=session.id,
            email=identity.email,
            auth_entity=self.auth_entity,
            role=validated.claims.role,
        )

    async def refresh(self, refresh_token: str) -> SessionResult | None:
        return await self._session_service.refresh_tokens(
            refresh_token,
            auth_entity=self.auth_entity,
        )

    # -- Password reset -------------------------------------------------------

    async def request_password_reset(self, email: str) -> None:
        """
        Issue a password reset token and hand it to the notifier.

        Unknown emails are ignored, so callers cannot tell whether an
        account exists.
        """
        identity = await self._find_by_email(email)
        if identity is None:
            logger.debug("Password reset requested for unknown email: %s", email)
            return

        raw_token = secrets.token_urlsafe(32)
        expires_at = utc_now() + self._reset_token_lifetime
        await self._identity_repo.set_reset_token(
            identity.id,
            _hash_secret(raw_token),
            expires_at,
        )

        try:
            self._notifier.send_password_reset(identity.email, raw_token)
        except Exception as e:
            logger.error("Failed to send password reset message: %s", e)

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Set a new password using a reset token.

        Every session of the identity, in every entity, is closed.

        Raises
        ------
        InvalidResetTokenError
            If the token is unknown or expired
        WeakPasswordError
            If the new password fails the strength policy
        """
        identity = await self._identity_repo.find_by_reset_token_hash(
            _hash_secret(token),
        )
        if identity is None or not identity.has_valid_reset_token():
            raise InvalidResetTokenError

        self._password_service.validate_strength(new_password)
        password_hash = self._password_service.hash(new_password)

        await self._identity_repo.update_password(identity.id, password_hash)
        await self._identity_repo.set_reset_token(identity.id, None, None)
        await self._session_service.logout_all_entities(identity.email)

        logger.info("Password reset completed for %s (%s)", identity.email, self.auth_entity)

    # -- Email verification ---------------------------------------------------

    async def request_email_verification(self, email: str) -> None:
        """Issue a verification code unless the email is unknown or verified."""
        identity = await self._find_by_email(email)
        if identity is None or identity.is_email_verified:
            return

        raw_code = secrets.token_urlsafe(32)
        expires_at = utc_now() + self._verification_lifetime
        await self._identity_repo.set_verification_code(
            identity.id,
            _hash_secret(raw_code),
            expires_at,
        )

        try:
            self._notifier.send_email_verification(identity.email, raw_code)
        except Exception as e:
            logger.error("Failed to send email verification message: %s", e)

    async def verify_email(self, code: str) -> None:
        identity = await self._identity_repo.find_by_verification_code_hash(
            _hash_secret(code),
        )
        if identity is None or not identity.has_valid_verification_code():
            raise InvalidVerificationCodeError

        await self._identity_repo.mark_email_verified(identity.id)
        logger.info("Email verified: %s (%s)", identity.email, self.auth_entity)

    # -- Password change ------------------------------------------------------

    async def change_password(
        self,
        email: str,
        current_password: str,
        new_password: str,
    ) -> None:
        """
        Change the password of an authenticated identity.

        All sessions of the identity in this entity are closed, the one
        that made the request included.

        Raises
        ------
        IdentityNotFoundError
            If no identity has this email
        InvalidCredentialsError
            If the current password is wrong
        WeakPasswordError
            If the new password fails the strength policy
        """
        identity = await self._find_by_email(email)
        if identity is None:
            raise IdentityNotFoundError(email)

        if not self._password_service.verify(current_password, identity.password_hash):
            raise InvalidCredentialsError

        self._password_service.validate_strength(new_password)
        password_hash = self._password_service.hash(new_password)
        await self._identity_repo.update_password(identity.id, password_hash)
        await self._session_service.logout_entity(identity.email, self.auth_entity)

        logger.info("Password changed for %s (%s)", identity.email, self.auth_entity)

    # -- Profile --------------------------------------------------------------

    async def get_profile(self, email: str) -> IdentityProfile | None:
        identity = await self._find_by_email(email)
        if identity is None:
            return None

        sessions = await self._session_service.get_sessions_by_entity(
            identity.email,
            self.auth_entity,
        )
        return IdentityProfile(
            identity=identity.to_view(),
            has_active_session=bool(sessions),
            total_active_sessions=len(sessions),
            auth_entity=self.auth_entity,
        )

    async def update_profile(
        self,
        email: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> IdentityView:
        identity = await self._find_by_email(email)
        if identity is None:
            raise IdentityNotFoundError(email)

        updated = await self._identity_repo.update_profile(
            identity.id,
            first_name=first_name,
            last_name=last_name,
        )
        if updated is None:
            raise IdentityNotFoundError(email)
        return updated.to_view()

    async def get_active_sessions_for_user(self, email: str) -> list[SessionView]:
        sessions = await self._session_service.get_active_sessions_for_user(email)
        return [session.to_view() for session in sessions]

    async def get_session(self, session_id: UUID) -> SessionView:
        """Session of this entity by id; raises if missing or foreign."""
        session = await self._session_service.require_session(
            session_id,
            self.auth_entity,
        )
        return session.to_view()

    # -- Maintenance and utilities --------------------------------------------

    async def get_session_stats(self, auth_entity: str | None = None) -> SessionStats:
        return await self._session_service.get_session_stats(auth_entity)

    async def purge_expired_sessions(self) -> int:
        return await self._session_service.purge_expired_sessions()

    async def purge_inactive_sessions(self, days_old: int = 30) -> int:
        return await self._session_service.purge_inactive_sessions(days_old)

    def score_password(self, password: str) -> PasswordStrength:
        return self._password_service.score_strength(password)

    def generate_temporary_password(self, length: int = 12) -> str:
        return self._password_service.generate_temporary(length)

    def get_module_info(self) -> ModuleInfo:
        return ModuleInfo(
            auth_entity=self.auth_entity,
            table_name=self._entity.table_name,
            max_login_attempts=self._max_login_attempts,
            lock_duration_minutes=self._lock_duration_minutes,
            defaults=dict(self._entity.defaults),
        )
