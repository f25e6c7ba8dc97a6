"""SessionRepositorySQLAlchemy against PostgreSQL via Testcontainers."""

from datetime import timedelta

import pytest

from gatehouse_auth.persistence.sqlalchemy import SessionRepositorySQLAlchemy
from tests.shared.fixtures.factories import TEST_EMAIL, make_session, make_token_pair

pytestmark = pytest.mark.integration


class TestSessionRepositoryPostgres:
    """Behavior that depends on real timestamp and JSON columns."""

    @pytest.mark.asyncio
    async def test_round_trip_keeps_timezone(self, pg_session):
        """TIMESTAMPTZ columns come back timezone-aware and unchanged."""
        repo = SessionRepositorySQLAlchemy(pg_session)
        session = make_session()

        await repo.create(session)
        found = await repo.find_by_id(session.id)

        assert found is not None
        assert found.expires_at == session.expires_at
        assert found.access_expires_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_single_active_session_per_entity(self, pg_session):
        """Deactivating the pair before creating leaves exactly one active row."""
        repo = SessionRepositorySQLAlchemy(pg_session)
        first = make_session()
        await repo.create(first)

        await repo.deactivate_all_for_email_in_entity(TEST_EMAIL, "users")
        second = make_session()
        await repo.create(second)

        active = await repo.list_active_for_email_in_entity(TEST_EMAIL, "users")
        assert active == [second]

    @pytest.mark.asyncio
    async def test_purge_expired(self, pg_session):
        """Expired rows are deleted in one statement."""
        repo = SessionRepositorySQLAlchemy(pg_session)
        await repo.create(
            make_session(
                tokens=make_token_pair(
                    access_in=timedelta(hours=-2),
                    refresh_in=timedelta(hours=-1),
                ),
            ),
        )
        await repo.create(make_session(email="live@example.com"))

        assert await repo.purge_expired() == 1
        stats = await repo.stats()
        assert stats.total_active == 1
