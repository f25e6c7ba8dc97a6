"""SQLAlchemy implementation of SessionRepository.

Bulk deactivation and purges are single predicate statements so they
never need to load or lock individual rows.
"""

import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy import Select, delete, distinct, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse_auth.persistence.sqlalchemy.models import SessionModel
from gatehouse_auth.repositories import SessionRepository, SessionStats
from gatehouse_auth.session import DeviceInfo, Session, SessionStatus
from gatehouse_auth.time import ensure_tz_aware, utc_now

logger = logging.getLogger(__name__)


class SessionRepositorySQLAlchemy(SessionRepository):
    """
    SQLAlchemy implementation of SessionRepository.

    Flushes but never commits; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Parameters
        ----------
        session
            SQLAlchemy async session
        """
        self._session = session

    def _to_domain(self, model: SessionModel) -> Session:
        """Map SQLAlchemy model to the session entity."""
        return Session(
            id=model.id,
            identity_id=model.identity_id,
            email=model.email,
            auth_entity=model.auth_entity,
            access_token=model.access_token,
            refresh_token=model.refresh_token,
            access_expires_at=ensure_tz_aware(model.access_expires_at),
            refresh_expires_at=ensure_tz_aware(model.refresh_expires_at),
            expires_at=ensure_tz_aware(model.expires_at),
            status=SessionStatus.ACTIVE if model.is_active else SessionStatus.INACTIVE,
            last_activity_at=ensure_tz_aware(model.last_activity_at),
            created_at=ensure_tz_aware(model.created_at),
            role=model.role,
            device=DeviceInfo(
                ip_address=model.ip_address,
                user_agent=model.user_agent,
                device_name=model.device_name,
                device_type=model.device_type,
            ),
            metadata=model.session_metadata,
        )

    def _to_model(self, session: Session) -> SessionModel:
        device = session.device
        return SessionModel(
            id=session.id,
            identity_id=session.identity_id,
            email=session.email,
            auth_entity=session.auth_entity,
            role=session.role,
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            access_expires_at=session.access_expires_at,
            refresh_expires_at=session.refresh_expires_at,
            expires_at=session.expires_at,
            is_active=session.is_active,
            last_activity_at=session.last_activity_at,
            device_name=device.device_name,
            device_type=device.device_type,
            ip_address=device.ip_address,
            user_agent=device.user_agent,
            session_metadata=session.metadata or None,
            created_at=session.created_at,
        )

    async def _first(self, stmt: Select) -> Session | None:
        # Bulk updates bypass the identity map, so always reload row state
        result = await self._session.execute(
            stmt.execution_options(populate_existing=True),
        )
        model = result.scalars().first()
        return self._to_domain(model) if model else None

    async def _all(self, stmt: Select) -> list[Session]:
        result = await self._session.execute(
            stmt.execution_options(populate_existing=True),
        )
        return [self._to_domain(model) for model in result.scalars().all()]

    async def create(self, session: Session) -> Session:
        model = self._to_model(session)
        self._session.add(model)
        await self._session.flush()
        logger.debug(
            "Stored session %s for %s (%s)",
            session.id,
            session.email,
            session.auth_entity,
        )
        return self._to_domain(model)

    async def find_by_id(self, session_id: UUID) -> Session | None:
        return await self._first(
            select(SessionModel).where(SessionModel.id == session_id),
        )

    async def find_active_by_id(self, session_id: UUID) -> Session | None:
        return await self._first(
            select(SessionModel).where(
                SessionModel.id == session_id,
                SessionModel.is_active.is_(True),
            ),
        )

    async def find_active_by_email_and_entity(
        self,
        email: str,
        auth_entity: str,
    ) -> Session | None:
        return await self._first(
            select(SessionModel)
            .where(
                SessionModel.email == email,
                SessionModel.auth_entity == auth_entity,
                SessionModel.is_active.is_(True),
            )
            .order_by(SessionModel.last_activity_at.desc()),
        )

    async def find_by_refresh_token(self, refresh_token: str) -> Session | None:
        return await self._first(
            select(SessionModel).where(SessionModel.refresh_token == refresh_token),
        )

    async def deactivate_all_for_email_in_entity(
        self,
        email: str,
        auth_entity: str,
    ) -> None:
        stmt = (
            update(SessionModel)
            .where(
                SessionModel.email == email,
                SessionModel.auth_entity == auth_entity,
                SessionModel.is_active.is_(True),
            )
            .values(is_active=False, last_activity_at=utc_now())
        )
        await self._session.execute(stmt)
        await self._session.flush()

    async def deactivate_all_for_email(self, email: str) -> None:
        stmt = (
            update(SessionModel)
            .where(
                SessionModel.email == email,
                SessionModel.is_active.is_(True),
            )
            .values(is_active=False, last_activity_at=utc_now())
        )
        await self._session.execute(stmt)
        await self._session.flush()

    async def deactivate(self, session_id: UUID) -> None:
        stmt = (
            update(SessionModel)
            .where(SessionModel.id == session_id)
            .values(is_active=False, last_activity_at=utc_now())
        )
        await self._session.execute(stmt)
        await self._session.flush()

    async def update_tokens(  # noqa: PLR0913
        self,
        session_id: UUID,
        access_token: str,
        refresh_token: str | None = None,
        access_expires_at: datetime | None = None,
        refresh_expires_at: datetime | None = None,
    ) -> None:
        values: dict[str, object] = {
            "access_token": access_token,
            "last_activity_at": utc_now(),
        }
        if access_expires_at is not None:
            values["access_expires_at"] = access_expires_at
        if refresh_token is not None:
            values["refresh_token"] = refresh_token
        if refresh_expires_at is not None:
            values["refresh_expires_at"] = refresh_expires_at
            values["expires_at"] = refresh_expires_at

        stmt = update(SessionModel).where(SessionModel.id == session_id).values(**values)
        await self._session.execute(stmt)
        await self._session.flush()

    async def update_activity(
        self,
        session_id: UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        values: dict[str, object] = {"last_activity_at": utc_now()}
        if ip_address:
            values["ip_address"] = ip_address
        if user_agent:
            values["user_agent"] = user_agent

        stmt = update(SessionModel).where(SessionModel.id == session_id).values(**values)
        await self._session.execute(stmt)
        await self._session.flush()

    async def list_active_for_email(self, email: str) -> list[Session]:
        return await self._all(
            select(SessionModel)
            .where(
                SessionModel.email == email,
                SessionModel.is_active.is_(True),
            )
            .order_by(
                SessionModel.auth_entity.asc(),
                SessionModel.last_activity_at.desc(),
            ),
        )

    async def list_active_for_email_in_entity(
        self,
        email: str,
        auth_entity: str,
    ) -> list[Session]:
        return await self._all(
            select(SessionModel)
            .where(
                SessionModel.email == email,
                SessionModel.auth_entity == auth_entity,
                SessionModel.is_active.is_(True),
            )
            .order_by(SessionModel.last_activity_at.desc()),
        )

    async def has_active_session(self, email: str, auth_entity: str) -> bool:
        stmt = (
            select(func.count())
            .select_from(SessionModel)
            .where(
                SessionModel.email == email,
                SessionModel.auth_entity == auth_entity,
                SessionModel.is_active.is_(True),
            )
        )
        result = await self._session.execute(stmt)
        return result.scalar_one() > 0

    async def is_owned_by(
        self,
        session_id: UUID,
        email: str,
        auth_entity: str,
    ) -> bool:
        stmt = (
            select(func.count())
            .select_from(SessionModel)
            .where(
                SessionModel.id == session_id,
                SessionModel.email == email,
                SessionModel.auth_entity == auth_entity,
                SessionModel.is_active.is_(True),
            )
        )
        result = await self._session.execute(stmt)
        return result.scalar_one() > 0

    async def purge_expired(self) -> int:
        stmt = delete(SessionModel).where(SessionModel.expires_at < utc_now())
        result = await self._session.execute(stmt)
        await self._session.flush()
        deleted = result.rowcount or 0  # type: ignore[attr-defined]
        logger.info("Purged %d expired sessions", deleted)
        return deleted

    async def purge_inactive_older_than(self, days: int) -> int:
        cutoff = utc_now() - timedelta(days=days)
        stmt = delete(SessionModel).where(
            SessionModel.is_active.is_(False),
            SessionModel.last_activity_at < cutoff,
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        deleted = result.rowcount or 0  # type: ignore[attr-defined]
        logger.info("Purged %d sessions inactive for more than %d days", deleted, days)
        return deleted

    async def count_active_by_entity(self, auth_entity: str) -> int:
        stmt = (
            select(func.count())
            .select_from(SessionModel)
            .where(
                SessionModel.auth_entity == auth_entity,
                SessionModel.is_active.is_(True),
            )
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def stats(self, auth_entity: str | None = None) -> SessionStats:
        filters = [SessionModel.is_active.is_(True)]
        if auth_entity is not None:
            filters.append(SessionModel.auth_entity == auth_entity)

        by_entity_stmt = (
            select(SessionModel.auth_entity, func.count())
            .where(*filters)
            .group_by(SessionModel.auth_entity)
        )
        unique_stmt = select(func.count(distinct(SessionModel.email))).where(*filters)

        by_entity = {
            entity: count
            for entity, count in (await self._session.execute(by_entity_stmt)).all()
        }
        unique_users = (await self._session.execute(unique_stmt)).scalar_one()

        return SessionStats(
            total_active=sum(by_entity.values()),
            unique_users=unique_users,
            by_entity=by_entity,
        )
