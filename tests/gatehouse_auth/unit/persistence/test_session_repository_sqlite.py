"""SessionRepositorySQLAlchemy against an in-memory SQLite database."""

from datetime import timedelta
from uuid import uuid4

import pytest

from gatehouse_auth import DeviceInfo, Session, SessionStatus
from gatehouse_auth.persistence.sqlalchemy import SessionRepositorySQLAlchemy
from gatehouse_auth.time import utc_now
from tests.shared.fixtures.factories import TEST_EMAIL, make_session, make_token_pair


def _old_inactive_session(days_ago: int) -> Session:
    tokens = make_token_pair()
    stamp = utc_now() - timedelta(days=days_ago)
    return Session(
        id=uuid4(),
        identity_id=uuid4(),
        email=TEST_EMAIL,
        auth_entity="users",
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        access_expires_at=tokens.access_expires_at,
        refresh_expires_at=tokens.refresh_expires_at,
        status=SessionStatus.INACTIVE,
        last_activity_at=stamp,
        created_at=stamp,
    )


class TestSessionRepositoryLookups:
    """Create and find operations."""

    @pytest.mark.asyncio
    async def test_create_and_find_by_id(self, db_session):
        """A stored session round-trips with its device and tz-aware times."""
        repo = SessionRepositorySQLAlchemy(db_session)
        device = DeviceInfo(
            ip_address="127.0.0.1",
            user_agent="pytest",
            device_name="Unknown",
            device_type="desktop",
        )
        session = make_session(device=device, role="user")

        await repo.create(session)
        found = await repo.find_by_id(session.id)

        assert found is not None
        assert found.id == session.id
        assert found.email == TEST_EMAIL
        assert found.role == "user"
        assert found.device == device
        assert found.expires_at.tzinfo is not None
        assert found.is_active

    @pytest.mark.asyncio
    async def test_find_unknown(self, db_session):
        """Unknown ids and tokens return None."""
        repo = SessionRepositorySQLAlchemy(db_session)

        assert await repo.find_by_id(uuid4()) is None
        assert await repo.find_by_refresh_token("nope") is None

    @pytest.mark.asyncio
    async def test_find_by_refresh_token(self, db_session):
        """Sessions are found by their current refresh token."""
        repo = SessionRepositorySQLAlchemy(db_session)
        session = make_session()
        await repo.create(session)

        found = await repo.find_by_refresh_token(session.refresh_token)

        assert found == session

    @pytest.mark.asyncio
    async def test_find_active_by_email_and_entity(self, db_session):
        """Lookups are scoped to the entity."""
        repo = SessionRepositorySQLAlchemy(db_session)
        user_session = make_session(auth_entity="users")
        admin_session = make_session(auth_entity="admins")
        await repo.create(user_session)
        await repo.create(admin_session)

        assert await repo.find_active_by_email_and_entity(TEST_EMAIL, "users") == user_session
        assert await repo.find_active_by_email_and_entity(TEST_EMAIL, "admins") == admin_session
        assert await repo.find_active_by_email_and_entity(TEST_EMAIL, "vendors") is None


class TestSessionRepositoryDeactivation:
    """Bulk and single deactivation."""

    @pytest.mark.asyncio
    async def test_deactivate_single(self, db_session):
        """A deactivated session is no longer found as active."""
        repo = SessionRepositorySQLAlchemy(db_session)
        session = make_session()
        await repo.create(session)

        await repo.deactivate(session.id)

        assert await repo.find_active_by_id(session.id) is None
        stored = await repo.find_by_id(session.id)
        assert stored is not None
        assert stored.status == SessionStatus.INACTIVE

    @pytest.mark.asyncio
    async def test_deactivate_entity_leaves_other_entities(self, db_session):
        """Entity-scoped deactivation does not touch other entities."""
        repo = SessionRepositorySQLAlchemy(db_session)
        user_session = make_session(auth_entity="users")
        admin_session = make_session(auth_entity="admins")
        await repo.create(user_session)
        await repo.create(admin_session)

        await repo.deactivate_all_for_email_in_entity(TEST_EMAIL, "users")

        assert not await repo.has_active_session(TEST_EMAIL, "users")
        assert await repo.has_active_session(TEST_EMAIL, "admins")

    @pytest.mark.asyncio
    async def test_deactivate_all_entities(self, db_session):
        """Email-wide deactivation closes every entity's sessions."""
        repo = SessionRepositorySQLAlchemy(db_session)
        await repo.create(make_session(auth_entity="users"))
        await repo.create(make_session(auth_entity="admins"))
        other = make_session(email="other@example.com")
        await repo.create(other)

        await repo.deactivate_all_for_email(TEST_EMAIL)

        assert await repo.list_active_for_email(TEST_EMAIL) == []
        assert await repo.find_active_by_id(other.id) == other


class TestSessionRepositoryUpdates:
    """Token rotation and activity updates."""

    @pytest.mark.asyncio
    async def test_update_tokens_moves_expiry(self, db_session):
        """New refresh expiry becomes the session expiry."""
        repo = SessionRepositorySQLAlchemy(db_session)
        session = make_session(tokens=make_token_pair(refresh_in=timedelta(days=1)))
        await repo.create(session)
        new_tokens = make_token_pair(refresh_in=timedelta(days=7))

        await repo.update_tokens(
            session.id,
            access_token=new_tokens.access_token,
            refresh_token=new_tokens.refresh_token,
            access_expires_at=new_tokens.access_expires_at,
            refresh_expires_at=new_tokens.refresh_expires_at,
        )
        stored = await repo.find_by_id(session.id)

        assert stored.access_token == new_tokens.access_token
        assert stored.refresh_token == new_tokens.refresh_token
        assert stored.expires_at > session.expires_at
        assert await repo.find_by_refresh_token(session.refresh_token) is None

    @pytest.mark.asyncio
    async def test_update_activity_sets_device_fields(self, db_session):
        """Activity updates record a new address and user agent."""
        repo = SessionRepositorySQLAlchemy(db_session)
        session = make_session()
        await repo.create(session)

        await repo.update_activity(session.id, ip_address="10.1.1.1", user_agent="curl")
        stored = await repo.find_by_id(session.id)

        assert stored.device.ip_address == "10.1.1.1"
        assert stored.device.user_agent == "curl"


class TestSessionRepositoryQueries:
    """Listing, ownership and statistics."""

    @pytest.mark.asyncio
    async def test_list_active_for_email_ordered_by_entity(self, db_session):
        """Sessions are listed grouped by entity name."""
        repo = SessionRepositorySQLAlchemy(db_session)
        await repo.create(make_session(auth_entity="users"))
        await repo.create(make_session(auth_entity="admins"))
        await repo.create(make_session(auth_entity="vendors"))

        sessions = await repo.list_active_for_email(TEST_EMAIL)

        assert [s.auth_entity for s in sessions] == ["admins", "users", "vendors"]

    @pytest.mark.asyncio
    async def test_is_owned_by(self, db_session):
        """Ownership requires matching email, entity and an active flag."""
        repo = SessionRepositorySQLAlchemy(db_session)
        session = make_session()
        await repo.create(session)

        assert await repo.is_owned_by(session.id, TEST_EMAIL, "users")
        assert not await repo.is_owned_by(session.id, TEST_EMAIL, "admins")
        assert not await repo.is_owned_by(session.id, "other@example.com", "users")

        await repo.deactivate(session.id)
        assert not await repo.is_owned_by(session.id, TEST_EMAIL, "users")

    @pytest.mark.asyncio
    async def test_stats(self, db_session):
        """Stats count active sessions only."""
        repo = SessionRepositorySQLAlchemy(db_session)
        await repo.create(make_session(auth_entity="users"))
        await repo.create(make_session(auth_entity="admins"))
        await repo.create(make_session(email="b@example.com", auth_entity="users"))
        closed = make_session(email="c@example.com")
        await repo.create(closed)
        await repo.deactivate(closed.id)

        stats = await repo.stats()
        users_only = await repo.stats("users")

        assert stats.total_active == 3
        assert stats.unique_users == 2
        assert stats.by_entity == {"users": 2, "admins": 1}
        assert users_only.total_active == 2
        assert users_only.by_entity == {"users": 2}
        assert await repo.count_active_by_entity("admins") == 1


class TestSessionRepositoryPurge:
    """Hard deletes of dead rows."""

    @pytest.mark.asyncio
    async def test_purge_expired(self, db_session):
        """Only rows past their overall expiry are deleted."""
        repo = SessionRepositorySQLAlchemy(db_session)
        expired = make_session(
            tokens=make_token_pair(
                access_in=timedelta(hours=-2),
                refresh_in=timedelta(hours=-1),
            ),
        )
        live = make_session(email="live@example.com")
        await repo.create(expired)
        await repo.create(live)

        assert await repo.purge_expired() == 1
        assert await repo.find_by_id(expired.id) is None
        assert await repo.find_by_id(live.id) == live

    @pytest.mark.asyncio
    async def test_purge_inactive_older_than(self, db_session):
        """Inactive rows idle beyond the cutoff are deleted; active rows stay."""
        repo = SessionRepositorySQLAlchemy(db_session)
        old = _old_inactive_session(days_ago=45)
        recent = _old_inactive_session(days_ago=2)
        active = make_session(email="active@example.com")
        await repo.create(old)
        await repo.create(recent)
        await repo.create(active)

        assert await repo.purge_inactive_older_than(30) == 1
        assert await repo.find_by_id(old.id) is None
        assert await repo.find_by_id(recent.id) is not None
        assert await repo.find_by_id(active.id) is not None
