"""SQLAlchemy implementation of IdentityRepository."""

import logging
import re
from datetime import datetime, timedelta
from typing import Union
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse_auth.time import ensure_tz_aware, ensure_tz_aware_or_none, utc_now
from gatehouse_identity.domain.identity import Email, Identity, IdentityRepository
from gatehouse_identity.exceptions import (
    EmailAlreadyRegisteredError,
    UsernameTakenError,
)
from gatehouse_identity.infrastructure.persistence.sqlalchemy.models import (
    IdentityColumnsMixin,
)

logger = logging.getLogger(__name__)

# Postgres names the key column and constraint; SQLite names table.column.
# Neither form can occur inside an email address.
_USERNAME_CONFLICT = re.compile(
    r"key \(username\)=|_username_key\"|constraint failed: \w+\.username\b",
)


def _is_username_conflict(detail: str) -> bool:
    return _USERNAME_CONFLICT.search(detail) is not None


class IdentityRepositorySQLAlchemy(IdentityRepository):
    """SQLAlchemy implementation of the IdentityRepository interface.

    Bound to one identity model class, so one instance serves exactly one
    auth entity.
    """

    def __init__(
        self,
        session: AsyncSession,
        model_cls: type[IdentityColumnsMixin],
        auth_entity: str,
    ) -> None:
        self._session = session
        self._model_cls = model_cls
        self._auth_entity = auth_entity

    @property
    def auth_entity(self) -> str:
        return self._auth_entity

    async def find_by_id(self, identity_id: UUID) -> Identity | None:
        model = await self._find_model_by_id(identity_id)
        return self._map_to_domain(model) if model else None

    async def find_by_email(self, email: Union[str, Email]) -> Identity | None:
        email_value = email.value if isinstance(email, Email) else Email(email).value

        model = await self._find_one(self._model_cls.email == email_value)
        return self._map_to_domain(model) if model else None

    async def find_by_username(self, username: str) -> Identity | None:
        model = await self._find_one(self._model_cls.username == username)
        return self._map_to_domain(model) if model else None

    async def find_by_reset_token_hash(self, token_hash: str) -> Identity | None:
        model = await self._find_one(self._model_cls.reset_token_hash == token_hash)
        return self._map_to_domain(model) if model else None

    async def find_by_verification_code_hash(self, code_hash: str) -> Identity | None:
        model = await self._find_one(
            self._model_cls.verification_code_hash == code_hash,
        )
        return self._map_to_domain(model) if model else None

    async def email_exists(self, email: Union[str, Email]) -> bool:
        email_value = email.value if isinstance(email, Email) else Email(email).value
        return await self._exists(self._model_cls.email == email_value)

    async def username_exists(self, username: str) -> bool:
        return await self._exists(self._model_cls.username == username)

    async def create(self, identity: Identity) -> Identity:
        model = self._map_to_model(identity)
        self._session.add(model)

        try:
            await self._session.flush()
        except IntegrityError as e:
            detail = str(e.orig).lower()
            if _is_username_conflict(detail):
                raise UsernameTakenError(identity.username or "") from e
            if "unique" in detail or "duplicate" in detail:
                raise EmailAlreadyRegisteredError(identity.email) from e
            raise

        logger.info(
            "Created identity: %s (email: %s, entity: %s)",
            identity.id,
            identity.email,
            self._auth_entity,
        )
        return self._map_to_domain(model)

    async def update_profile(
        self,
        identity_id: UUID,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Identity | None:
        model = await self._find_model_by_id(identity_id)
        if model is None:
            return None

        if first_name is not None:
            model.first_name = first_name
        if last_name is not None:
            model.last_name = last_name
        model.updated_at = utc_now()
        await self._session.flush()
        return self._map_to_domain(model)

    async def increment_login_attempts(
        self,
        identity_id: UUID,
        max_attempts: int,
        lock_minutes: int,
    ) -> int:
        model_cls = self._model_cls
        stmt = (
            update(model_cls)
            .where(model_cls.id == identity_id)
            .values(
                login_attempts=model_cls.login_attempts + 1,
                updated_at=utc_now(),
            )
            .returning(model_cls.login_attempts)
        )
        attempts = (await self._session.execute(stmt)).scalar_one_or_none()
        if attempts is None:
            return 0

        if attempts >= max_attempts:
            await self._session.execute(
                update(model_cls)
                .where(model_cls.id == identity_id)
                .values(locked_until=utc_now() + timedelta(minutes=lock_minutes)),
            )
            logger.warning(
                "Account locked for %s %s due to %d failed attempts",
                self._auth_entity,
                identity_id,
                attempts,
            )

        await self._session.flush()
        return attempts

    async def record_successful_login(
        self,
        identity_id: UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        model = await self._find_model_by_id(identity_id)
        if model is None:
            return

        now = utc_now()
        model.login_attempts = 0
        model.locked_until = None
        model.last_login_at = now
        model.login_count += 1
        if ip_address:
            model.last_login_ip = ip_address
        if user_agent:
            model.last_user_agent = user_agent
        model.updated_at = now
        await self._session.flush()

    async def update_password(self, identity_id: UUID, password_hash: str) -> None:
        model = await self._find_model_by_id(identity_id)
        if model is None:
            return

        model.password_hash = password_hash
        model.updated_at = utc_now()
        await self._session.flush()
        logger.debug("Updated password for %s %s", self._auth_entity, identity_id)

    async def set_reset_token(
        self,
        identity_id: UUID,
        token_hash: str | None,
        expires_at: datetime | None,
    ) -> None:
        model = await self._find_model_by_id(identity_id)
        if model is None:
            return

        model.reset_token_hash = token_hash
        model.reset_token_expires_at = expires_at
        model.updated_at = utc_now()
        await self._session.flush()

    async def set_verification_code(
        self,
        identity_id: UUID,
        code_hash: str | None,
        expires_at: datetime | None,
    ) -> None:
        model = await self._find_model_by_id(identity_id)
        if model is None:
            return

        model.verification_code_hash = code_hash
        model.verification_code_expires_at = expires_at
        model.updated_at = utc_now()
        await self._session.flush()

    async def mark_email_verified(self, identity_id: UUID) -> None:
        model = await self._find_model_by_id(identity_id)
        if model is None:
            return

        model.is_email_verified = True
        model.verification_code_hash = None
        model.verification_code_expires_at = None
        model.updated_at = utc_now()
        await self._session.flush()

    async def _find_model_by_id(self, identity_id: UUID) -> IdentityColumnsMixin | None:
        return await self._find_one(self._model_cls.id == identity_id)

    async def _find_one(self, criterion) -> IdentityColumnsMixin | None:
        stmt = select(self._model_cls).where(criterion)
        # Counter updates bypass the identity map
        result = await self._session.execute(
            stmt.execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def _exists(self, criterion) -> bool:
        stmt = select(func.count()).select_from(self._model_cls).where(criterion)
        result = await self._session.execute(stmt)
        return result.scalar_one() > 0

    def _map_to_domain(self, model: IdentityColumnsMixin) -> Identity:
        return Identity.reconstitute(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            auth_entity=self._auth_entity,
            username=model.username,
            first_name=model.first_name,
            last_name=model.last_name,
            status=model.status,
            role=model.role,
            login_attempts=model.login_attempts,
            locked_until=ensure_tz_aware_or_none(model.locked_until),
            reset_token_hash=model.reset_token_hash,
            reset_token_expires_at=ensure_tz_aware_or_none(
                model.reset_token_expires_at,
            ),
            verification_code_hash=model.verification_code_hash,
            verification_code_expires_at=ensure_tz_aware_or_none(
                model.verification_code_expires_at,
            ),
            is_email_verified=model.is_email_verified,
            last_login_at=ensure_tz_aware_or_none(model.last_login_at),
            last_login_ip=model.last_login_ip,
            last_user_agent=model.last_user_agent,
            login_count=model.login_count,
            extras={name: getattr(model, name) for name in model.EXTRA_FIELDS},
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )

    def _map_to_model(self, identity: Identity) -> IdentityColumnsMixin:
        extras = identity.extras
        return self._model_cls(
            id=identity.id,
            email=identity.email,
            username=identity.username,
            password_hash=identity.password_hash,
            first_name=identity.first_name,
            last_name=identity.last_name,
            status=identity.status.value,
            role=identity.role,
            login_attempts=identity.login_attempts,
            is_email_verified=identity.is_email_verified,
            login_count=identity.login_count,
            created_at=identity.created_at,
            updated_at=identity.updated_at,
            **{
                name: extras[name]
                for name in self._model_cls.EXTRA_FIELDS
                if name in extras
            },
        )
