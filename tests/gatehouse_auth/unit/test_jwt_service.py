"""Unit tests for JWTService."""

from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from gatehouse_auth import (
    ConfigurationError,
    ExpiredTokenError,
    InvalidTokenError,
    JWTService,
    TokenType,
)
from tests.shared.fixtures.factories import TEST_EMAIL, TEST_SECRET, make_jwt_service


class TestJWTServiceIssue:
    """Tests for token creation."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = make_jwt_service()
        self.identity_id = uuid4()
        self.session_id = uuid4()

    def test_empty_secret_rejected(self):
        """An empty signing secret is a configuration error."""
        with pytest.raises(ConfigurationError):
            JWTService(secret_key="")

    def test_access_token_claims(self):
        """Access tokens carry the full claim set."""
        token = self.service.create_access_token(
            self.identity_id,
            self.session_id,
            TEST_EMAIL,
            "users",
            role="user",
        )

        claims = self.service.verify_token(token)

        assert claims.identity_id == self.identity_id
        assert claims.session_id == self.session_id
        assert claims.email == TEST_EMAIL
        assert claims.auth_entity == "users"
        assert claims.role == "user"
        assert claims.is_access_token()

    def test_wire_payload_shape(self):
        """The encoded payload uses the documented claim names."""
        token = self.service.create_access_token(
            self.identity_id,
            self.session_id,
            TEST_EMAIL,
            "admins",
        )

        payload = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])

        assert payload["sub"] == str(self.identity_id)
        assert payload["sessionId"] == str(self.session_id)
        assert payload["authEntity"] == "admins"
        assert payload["type"] == "access"
        assert "role" not in payload
        assert {"iat", "exp", "jti"} <= payload.keys()

    def test_refresh_token_has_no_email(self):
        """Refresh tokens omit the email claim."""
        token = self.service.create_refresh_token(
            self.identity_id,
            self.session_id,
            "users",
        )

        claims = self.service.verify_token(token)

        assert claims.token_type == TokenType.REFRESH
        assert claims.email is None

    def test_token_pair_shares_issue_instant(self):
        """Both expiries are computed from one instant."""
        pair = self.service.create_token_pair(
            self.identity_id,
            self.session_id,
            TEST_EMAIL,
            "users",
        )

        lifetime_gap = pair.refresh_expires_at - pair.access_expires_at
        assert lifetime_gap == timedelta(days=7) - timedelta(minutes=60)
        assert pair.access_token != pair.refresh_token

    def test_tokens_minted_together_differ(self):
        """Two pairs for the same session in the same second are distinct."""
        first = self.service.create_token_pair(
            self.identity_id,
            self.session_id,
            TEST_EMAIL,
            "users",
        )
        second = self.service.create_token_pair(
            self.identity_id,
            self.session_id,
            TEST_EMAIL,
            "users",
        )

        assert first.access_token != second.access_token
        assert first.refresh_token != second.refresh_token


class TestJWTServiceVerify:
    """Tests for verification and inspection."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = make_jwt_service()
        self.identity_id = uuid4()
        self.session_id = uuid4()

    def test_expired_token(self):
        """Tokens past their expiry raise ExpiredTokenError."""
        token = self.service.create_access_token(
            self.identity_id,
            self.session_id,
            TEST_EMAIL,
            "users",
            expires_delta=timedelta(seconds=-10),
        )

        with pytest.raises(ExpiredTokenError):
            self.service.verify_token(token)

    def test_expired_is_invalid_token(self):
        """ExpiredTokenError is an InvalidTokenError."""
        assert issubclass(ExpiredTokenError, InvalidTokenError)

    def test_wrong_secret(self):
        """Tokens signed with another secret are rejected."""
        other = JWTService(secret_key="another-secret")
        token = other.create_access_token(
            self.identity_id,
            self.session_id,
            TEST_EMAIL,
            "users",
        )

        with pytest.raises(InvalidTokenError):
            self.service.verify_token(token)

    def test_garbage_token(self):
        """Malformed strings are rejected."""
        with pytest.raises(InvalidTokenError):
            self.service.verify_token("not.a.token")

    def test_missing_claims(self):
        """A validly signed token without our claims is rejected."""
        token = jwt.encode(
            {"sub": str(self.identity_id), "iat": 0, "exp": 4102444800},
            TEST_SECRET,
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            self.service.verify_token(token)

    def test_decode_unverified(self):
        """Unverified decoding ignores signature and expiry."""
        other = JWTService(secret_key="another-secret")
        token = other.create_access_token(
            self.identity_id,
            self.session_id,
            TEST_EMAIL,
            "users",
            expires_delta=timedelta(seconds=-10),
        )

        claims = self.service.decode_unverified(token)

        assert claims is not None
        assert claims.session_id == self.session_id

    def test_decode_unverified_garbage(self):
        """Undecodable input yields None."""
        assert self.service.decode_unverified("garbage") is None

    def test_is_expired(self):
        """is_expired reports expiry without verifying the signature."""
        live = self.service.create_access_token(
            self.identity_id,
            self.session_id,
            TEST_EMAIL,
            "users",
        )
        dead = self.service.create_access_token(
            self.identity_id,
            self.session_id,
            TEST_EMAIL,
            "users",
            expires_delta=timedelta(seconds=-10),
        )

        assert not self.service.is_expired(live)
        assert self.service.is_expired(dead)
        assert self.service.is_expired("garbage")

    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            ("bearer abc", None),
            ("Bearer", None),
            ("Token abc", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extract_bearer(self, header, expected):
        """Only well-formed bearer headers yield a token."""
        assert JWTService.extract_bearer(header) == expected
