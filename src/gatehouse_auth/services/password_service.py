"""Password hashing service using bcrypt.

Provides secure password hashing and verification together with the
strength scoring used at registration and password change.
"""

import re
import secrets

import bcrypt

from gatehouse_auth.exceptions import WeakPasswordError
from gatehouse_auth.schemas import HashInfo, PasswordStrength

_UPPERCASE = re.compile(r"[A-Z]")
_LOWERCASE = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")
_WHITESPACE = re.compile(r"\s")

_TEMP_UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_TEMP_LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
_TEMP_DIGITS = "0123456789"
_TEMP_SPECIAL = "!@#$%^&*"


class PasswordHashingService:
    """Service for secure password hashing and verification.

    Uses bcrypt for password hashing with configurable work factor.
    Also provides password strength scoring.

    Examples
    --------
    >>> service = PasswordHashingService()
    >>> hash = service.hash("My_secure_passw0rd")
    >>> service.verify("My_secure_passw0rd", hash)
    True
    >>> service.verify("wrong_password", hash)
    False
    """

    # Password requirements
    MIN_LENGTH = 8
    MAX_SCORE = 5
    # bcrypt only looks at the first 72 bytes and refuses longer input
    MAX_BYTES = 72

    def __init__(self, rounds: int = 12):
        """Initialize the password hashing service.

        Parameters
        ----------
        rounds
            The bcrypt work factor (log2 of iterations). Default is 12,
            which is a good balance of security and performance.
            Higher values are more secure but slower.
        """
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Parameters
        ----------
        password
            The plaintext password to hash

        Returns
        -------
        The bcrypt hash as a string

        Raises
        ------
        WeakPasswordError
            If the password is empty or longer than bcrypt accepts
        """
        if not password:
            raise WeakPasswordError(["Password cannot be empty"])

        raw = password.encode("utf-8")
        if len(raw) > self.MAX_BYTES:
            raise WeakPasswordError(
                [f"Password cannot exceed {self.MAX_BYTES} bytes"],
            )

        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(raw, salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a hash.

        Parameters
        ----------
        password
            The plaintext password to check
        password_hash
            The bcrypt hash to verify against

        Returns
        -------
        True if password matches, False otherwise
        """
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except (ValueError, TypeError):
            # Invalid hash format or over-long password
            return False

    def score_strength(self, password: str) -> PasswordStrength:
        """Score a password from 0 to 5 and collect every violated rule.

        One point each for length, uppercase, lowercase, digit and special
        character; whitespace costs a point and always invalidates.
        """
        errors: list[str] = []
        score = 0

        if len(password) < self.MIN_LENGTH:
            errors.append(
                f"Password must be at least {self.MIN_LENGTH} characters long",
            )
        else:
            score += 1

        if not _UPPERCASE.search(password):
            errors.append("Password must contain at least one uppercase letter")
        else:
            score += 1

        if not _LOWERCASE.search(password):
            errors.append("Password must contain at least one lowercase letter")
        else:
            score += 1

        if not _DIGIT.search(password):
            errors.append("Password must contain at least one number")
        else:
            score += 1

        if not _SPECIAL.search(password):
            errors.append("Password must contain at least one special character")
        else:
            score += 1

        if _WHITESPACE.search(password):
            errors.append("Password cannot contain spaces")
            score -= 1

        return PasswordStrength(
            valid=not errors,
            score=max(0, min(self.MAX_SCORE, score)),
            errors=errors,
        )

    def validate_strength(self, password: str) -> PasswordStrength:
        """Validate that a password meets strength requirements.

        Raises
        ------
        WeakPasswordError
            With the itemized violations if the password is weak
        """
        strength = self.score_strength(password)
        if not strength.valid:
            raise WeakPasswordError(strength.errors)
        return strength

    def generate_temporary(self, length: int = 12) -> str:
        """Generate a random password containing every character class.

        Parameters
        ----------
        length
            Total length; values below 4 still yield one of each class
        """
        rng = secrets.SystemRandom()
        chars = [
            secrets.choice(_TEMP_UPPERCASE),
            secrets.choice(_TEMP_LOWERCASE),
            secrets.choice(_TEMP_DIGITS),
            secrets.choice(_TEMP_SPECIAL),
        ]
        alphabet = _TEMP_UPPERCASE + _TEMP_LOWERCASE + _TEMP_DIGITS + _TEMP_SPECIAL
        chars.extend(secrets.choice(alphabet) for _ in range(length - len(chars)))
        rng.shuffle(chars)
        return "".join(chars)

    def needs_rehash(self, password_hash: str, target_rounds: int | None = None) -> bool:
        """Check if a password hash needs to be rehashed.

        This is useful when upgrading the work factor. After changing
        the rounds setting, existing hashes can be identified for
        rehashing on next login.

        Parameters
        ----------
        password_hash
            The existing hash to check
        target_rounds
            Rounds to compare against (defaults to the configured rounds)

        Returns
        -------
        True if the hash should be regenerated
        """
        info = self.hash_info(password_hash)
        if not info.is_valid:
            return True
        return info.rounds != (target_rounds or self._rounds)

    def hash_info(self, password_hash: str) -> HashInfo:
        """Extract algorithm and cost factor from a bcrypt hash."""
        try:
            # bcrypt format: $2b$XX$<53 chars of salt+digest>
            parts = password_hash.split("$")
            if len(parts) == 4 and parts[1].startswith("2") and len(parts[3]) == 53:
                return HashInfo(algorithm="bcrypt", rounds=int(parts[2]), is_valid=True)
        except (ValueError, AttributeError):
            pass
        return HashInfo(algorithm="unknown", rounds=0, is_valid=False)
