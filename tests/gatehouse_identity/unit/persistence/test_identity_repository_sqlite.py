"""IdentityRepositorySQLAlchemy against an in-memory SQLite database."""

from datetime import timedelta
from uuid import uuid4

import pytest

from gatehouse_auth.time import utc_now
from gatehouse_identity import (
    EmailAlreadyRegisteredError,
    EntityResolver,
    Identity,
    UsernameTakenError,
)
from gatehouse_identity.infrastructure.persistence.sqlalchemy.repositories.identity_repository import (  # noqa: E501
    _is_username_conflict,
)

RESOLVER = EntityResolver()


def _new_identity(
    email: str = "jane@example.com",
    auth_entity: str = "users",
    username: str | None = None,
) -> Identity:
    return Identity.create(
        email=email,
        password_hash="$2b$04$notarealhash",
        auth_entity=auth_entity,
        username=username,
        extras=RESOLVER.resolve(auth_entity).defaults,
    )


class TestIdentityRepositoryCreate:
    """Inserts and uniqueness."""

    @pytest.mark.asyncio
    async def test_create_and_find(self, db_session):
        """A created identity is found by id, email and username."""
        repo = RESOLVER.resolve("users").repository(db_session)
        identity = _new_identity(username="jane")

        await repo.create(identity)

        assert await repo.find_by_id(identity.id) == identity
        assert await repo.find_by_email("JANE@example.com") == identity
        assert await repo.find_by_username("jane") == identity
        assert await repo.email_exists("jane@example.com")
        assert await repo.username_exists("jane")
        assert not await repo.username_exists("john")

    @pytest.mark.asyncio
    async def test_admin_extras(self, db_session):
        """Admin rows carry their admin level."""
        repo = RESOLVER.resolve("admins").repository(db_session)
        identity = _new_identity(auth_entity="admins")

        stored = await repo.create(identity)

        assert stored.auth_entity == "admins"
        assert stored.extras == {"admin_level": 1}

    @pytest.mark.asyncio
    async def test_vendor_default_applied_by_column(self, db_session):
        """Column defaults fill extras that were not supplied."""
        repo = RESOLVER.resolve("vendors").repository(db_session)
        identity = Identity.create(
            email="shop@example.com",
            password_hash="$2b$04$notarealhash",
            auth_entity="vendors",
        )

        await repo.create(identity)
        found = await repo.find_by_id(identity.id)

        assert found.extras == {"vendor_status": "pending"}

    @pytest.mark.asyncio
    async def test_entities_are_separate_tables(self, db_session):
        """One email may exist once per entity."""
        users = RESOLVER.resolve("users").repository(db_session)
        admins = RESOLVER.resolve("admins").repository(db_session)

        await users.create(_new_identity())
        await admins.create(_new_identity(auth_entity="admins"))

        assert (await users.find_by_email("jane@example.com")).auth_entity == "users"
        assert (await admins.find_by_email("jane@example.com")).auth_entity == "admins"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, db_session):
        """The unique email constraint maps to EmailAlreadyRegisteredError."""
        repo = RESOLVER.resolve("users").repository(db_session)
        await repo.create(_new_identity())

        with pytest.raises(EmailAlreadyRegisteredError):
            await repo.create(_new_identity())

    @pytest.mark.asyncio
    async def test_duplicate_username(self, db_session):
        """The unique username constraint maps to UsernameTakenError."""
        repo = RESOLVER.resolve("users").repository(db_session)
        await repo.create(_new_identity(username="jane"))

        with pytest.raises(UsernameTakenError):
            await repo.create(_new_identity(email="other@example.com", username="jane"))

    @pytest.mark.asyncio
    async def test_duplicate_email_that_mentions_username(self, db_session):
        """An email containing the word username is still an email conflict."""
        repo = RESOLVER.resolve("users").repository(db_session)
        await repo.create(_new_identity(email="username@example.com"))

        with pytest.raises(EmailAlreadyRegisteredError):
            await repo.create(_new_identity(email="username@example.com"))

    @pytest.mark.parametrize(
        ("detail", "expected"),
        [
            ("unique constraint failed: users.username", True),
            ("unique constraint failed: users.email", False),
            (
                'duplicate key value violates unique constraint "admins_username_key"\n'
                "detail:  key (username)=(jane) already exists.",
                True,
            ),
            (
                'duplicate key value violates unique constraint "ix_users_email"\n'
                "detail:  key (email)=(a.username_key@example.com) already exists.",
                False,
            ),
        ],
    )
    def test_username_conflict_detection(self, detail, expected):
        """Only the username column or constraint marks a username conflict."""
        assert _is_username_conflict(detail) is expected


class TestIdentityRepositoryLogin:
    """Attempt counting and login bookkeeping."""

    @pytest.mark.asyncio
    async def test_lock_after_max_attempts(self, db_session):
        """Reaching the attempt limit sets a lock in the future."""
        repo = RESOLVER.resolve("users").repository(db_session)
        identity = await repo.create(_new_identity())

        for expected in range(1, 4):
            assert await repo.increment_login_attempts(identity.id, 3, 15) == expected

        locked = await repo.find_by_id(identity.id)
        assert locked.is_locked()
        assert 14 <= locked.lock_minutes_remaining() <= 15

    @pytest.mark.asyncio
    async def test_increment_counts_in_the_database(self, db_session):
        """Increments accumulate in SQL and are visible to later reads."""
        repo = RESOLVER.resolve("users").repository(db_session)
        identity = await repo.create(_new_identity())
        loaded = await repo.find_by_id(identity.id)

        assert await repo.increment_login_attempts(identity.id, 5, 15) == 1
        assert await repo.increment_login_attempts(identity.id, 5, 15) == 2

        found = await repo.find_by_id(identity.id)
        assert loaded.login_attempts == 0
        assert found.login_attempts == 2
        assert not found.is_locked()

    @pytest.mark.asyncio
    async def test_successful_login_resets(self, db_session):
        """A successful login clears attempts and lock and counts the login."""
        repo = RESOLVER.resolve("users").repository(db_session)
        identity = await repo.create(_new_identity())
        await repo.increment_login_attempts(identity.id, 1, 15)

        await repo.record_successful_login(
            identity.id,
            ip_address="10.0.0.1",
            user_agent="pytest",
        )
        found = await repo.find_by_id(identity.id)

        assert found.login_attempts == 0
        assert found.locked_until is None
        assert found.login_count == 1
        assert found.last_login_ip == "10.0.0.1"
        assert found.last_login_at is not None
        assert found.last_login_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_unknown_identity(self, db_session):
        """Counters on unknown ids are no-ops."""
        repo = RESOLVER.resolve("users").repository(db_session)

        assert await repo.increment_login_attempts(uuid4(), 5, 15) == 0
        assert await repo.update_profile(uuid4(), first_name="X") is None


class TestIdentityRepositorySecrets:
    """Reset tokens, verification codes and profile updates."""

    @pytest.mark.asyncio
    async def test_reset_token_lifecycle(self, db_session):
        """Reset tokens are found by hash until cleared."""
        repo = RESOLVER.resolve("users").repository(db_session)
        identity = await repo.create(_new_identity())
        expires_at = utc_now() + timedelta(hours=1)

        await repo.set_reset_token(identity.id, "a" * 64, expires_at)
        found = await repo.find_by_reset_token_hash("a" * 64)
        assert found == identity
        assert found.has_valid_reset_token()

        await repo.set_reset_token(identity.id, None, None)
        assert await repo.find_by_reset_token_hash("a" * 64) is None

    @pytest.mark.asyncio
    async def test_mark_email_verified_clears_code(self, db_session):
        """Verification sets the flag and discards the code."""
        repo = RESOLVER.resolve("users").repository(db_session)
        identity = await repo.create(_new_identity())
        await repo.set_verification_code(
            identity.id,
            "b" * 64,
            utc_now() + timedelta(hours=24),
        )

        await repo.mark_email_verified(identity.id)
        found = await repo.find_by_id(identity.id)

        assert found.is_email_verified
        assert found.verification_code_hash is None
        assert await repo.find_by_verification_code_hash("b" * 64) is None

    @pytest.mark.asyncio
    async def test_update_profile_and_password(self, db_session):
        """Only supplied profile fields change."""
        repo = RESOLVER.resolve("users").repository(db_session)
        identity = await repo.create(_new_identity())

        updated = await repo.update_profile(identity.id, first_name="Jane")
        await repo.update_password(identity.id, "$2b$04$another")
        found = await repo.find_by_id(identity.id)

        assert updated.first_name == "Jane"
        assert updated.last_name is None
        assert found.password_hash == "$2b$04$another"
