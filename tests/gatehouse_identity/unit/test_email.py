"""Tests for the Email value object."""

import pytest

from gatehouse_identity.domain.identity import Email
from gatehouse_identity.exceptions import InvalidEmailError


class TestEmail:
    """Validation and normalization."""

    def test_normalizes_case_and_whitespace(self):
        """Emails are stored lower-cased without surrounding whitespace."""
        email = Email("  John.Doe@Example.COM ")

        assert email.value == "john.doe@example.com"
        assert str(email) == "john.doe@example.com"

    def test_equal_after_normalization(self):
        """Two spellings of one address compare equal."""
        assert Email("A@b.io") == Email("a@B.io")

    @pytest.mark.parametrize(
        "raw",
        ["", "plainaddress", "missing@tld", "@example.com", "a b@example.com"],
    )
    def test_invalid(self, raw):
        """Malformed addresses are rejected."""
        with pytest.raises(InvalidEmailError):
            Email(raw)

    def test_invalid_email_is_value_error(self):
        """Callers may treat it as a plain ValueError."""
        with pytest.raises(ValueError, match="Invalid email format"):
            Email("not-an-email")

    def test_parts(self):
        """Local part and domain are split at the at-sign."""
        email = Email("Jane+tag@Mail.Example.org")

        assert email.local_part == "jane+tag"
        assert email.domain == "mail.example.org"
