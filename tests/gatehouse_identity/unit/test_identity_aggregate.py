"""Tests for the Identity aggregate."""

from datetime import timedelta

from gatehouse_auth.time import utc_now
from gatehouse_identity.domain.identity import Identity, IdentityStatus


def _identity(**overrides) -> Identity:
    fields = {
        "email": "Jane@Example.com",
        "password_hash": "$2b$04$hash",
        "auth_entity": "users",
    }
    fields.update(overrides)
    return Identity.reconstitute(**fields)


class TestIdentityCreate:
    """Factory defaults."""

    def test_create_defaults(self):
        """New identities are active, unverified and carry role "user"."""
        identity = Identity.create(
            email="jane@example.com",
            password_hash="$2b$04$hash",
            auth_entity="admins",
            extras={"admin_level": 1},
        )

        assert identity.status == IdentityStatus.ACTIVE
        assert identity.is_active
        assert identity.role == "user"
        assert identity.is_email_verified is False
        assert identity.login_attempts == 0
        assert identity.extras == {"admin_level": 1}

    def test_email_normalized(self):
        """The email is normalized on construction."""
        assert _identity().email == "jane@example.com"

    def test_status_accepts_string(self):
        """Stored status strings map onto IdentityStatus."""
        assert _identity(status="locked").status == IdentityStatus.LOCKED


class TestIdentityLockout:
    """Time-based lockout."""

    def test_not_locked_without_timestamp(self):
        """No lock timestamp means not locked."""
        identity = _identity()

        assert not identity.is_locked()
        assert identity.lock_minutes_remaining() == 0

    def test_locked_until_future(self):
        """A lock in the future is in force and rounds minutes up."""
        now = utc_now()
        identity = _identity(locked_until=now + timedelta(minutes=14, seconds=1))

        assert identity.is_locked(now)
        assert identity.lock_minutes_remaining(now) == 15

    def test_lock_elapsed(self):
        """A lock in the past has no effect."""
        now = utc_now()
        identity = _identity(locked_until=now - timedelta(seconds=1))

        assert not identity.is_locked(now)
        assert identity.lock_minutes_remaining(now) == 0


class TestIdentitySecrets:
    """Reset token and verification code validity."""

    def test_reset_token_validity(self):
        """Reset tokens need a hash and an unexpired timestamp."""
        now = utc_now()

        assert not _identity().has_valid_reset_token(now)
        assert _identity(
            reset_token_hash="abc",
            reset_token_expires_at=now + timedelta(minutes=5),
        ).has_valid_reset_token(now)
        assert not _identity(
            reset_token_hash="abc",
            reset_token_expires_at=now - timedelta(minutes=5),
        ).has_valid_reset_token(now)

    def test_verification_code_validity(self):
        """Verification codes need a hash and an unexpired timestamp."""
        now = utc_now()

        assert _identity(
            verification_code_hash="abc",
            verification_code_expires_at=now + timedelta(hours=1),
        ).has_valid_verification_code(now)
        assert not _identity(
            verification_code_expires_at=now + timedelta(hours=1),
        ).has_valid_verification_code(now)


class TestIdentityView:
    """Sanitized projection."""

    def test_view_has_no_secrets(self):
        """The view omits hashes, counters and lock state."""
        identity = _identity(
            reset_token_hash="secret",
            login_attempts=3,
            extras={"vendor_status": "pending"},
        )

        data = identity.to_view().to_dict()

        assert data["email"] == "jane@example.com"
        assert data["vendor_status"] == "pending"
        assert data["status"] == "active"
        for key in ("password_hash", "reset_token_hash", "login_attempts", "locked_until"):
            assert key not in data

    def test_equality_by_id(self):
        """Identities compare by id."""
        identity = _identity()
        same = _identity(id=identity.id, email="other@example.com")

        assert identity == same
        assert len({identity, same}) == 1
