"""Factory wiring the authentication services from settings."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse_auth import JWTService, PasswordHashingService, SessionService
from gatehouse_auth.persistence.sqlalchemy import SessionRepositorySQLAlchemy
from gatehouse_config.settings import Settings, get_settings
from gatehouse_identity.application.entity_resolver import (
    EntityResolver,
    ResolvedAuthEntity,
)
from gatehouse_identity.application.ports import IdentityNotifier
from gatehouse_identity.application.services import AuthenticationService
from gatehouse_identity.infrastructure.notifications import LoggingIdentityNotifier

logger = logging.getLogger(__name__)


class AuthServiceFactory:
    """
    Builds per-session services around shared stateless singletons.

    Password hashing, token signing and entity resolution are set up once
    here; session and authentication services are cheap and bound to one
    ``AsyncSession`` each.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        resolver: EntityResolver | None = None,
        notifier: IdentityNotifier | None = None,
        password_service: PasswordHashingService | None = None,
    ):
        self._settings = settings or get_settings()
        self._resolver = resolver or EntityResolver()
        self._notifier = notifier or LoggingIdentityNotifier()
        self._password_service = password_service or PasswordHashingService(
            rounds=self._settings.bcrypt_rounds,
        )
        self._jwt_service = JWTService(
            secret_key=self._settings.jwt_secret_key.get_secret_value(),
            access_token_expire_minutes=self._settings.jwt_access_token_expire_minutes,
            refresh_token_expire_days=self._settings.jwt_refresh_token_expire_days,
        )
        self._entity = self._resolver.resolve(self._settings.auth_entity)
        logger.info(
            "Auth configured for entity '%s' (table %s)",
            self._entity.name,
            self._entity.table_name,
        )

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def entity(self) -> ResolvedAuthEntity:
        return self._entity

    @property
    def jwt_service(self) -> JWTService:
        return self._jwt_service

    @property
    def password_service(self) -> PasswordHashingService:
        return self._password_service

    def session_service(self, session: AsyncSession) -> SessionService:
        return SessionService(SessionRepositorySQLAlchemy(session), self._jwt_service)

    def authentication_service(
        self,
        session: AsyncSession,
        auth_entity: str | None = None,
    ) -> AuthenticationService:
        """Authentication service for the configured entity, or ``auth_entity``."""
        entity = (
            self._resolver.resolve(auth_entity) if auth_entity else self._entity
        )
        return AuthenticationService(
            resolved_entity=entity,
            identity_repository=entity.repository(session),
            session_service=self.session_service(session),
            password_service=self._password_service,
            notifier=self._notifier,
            max_login_attempts=self._settings.max_login_attempts,
            lock_duration_minutes=self._settings.lock_duration_minutes,
            reset_token_expire_minutes=self._settings.password_reset_token_expire_minutes,
            verification_expire_hours=self._settings.email_verification_expire_hours,
        )
