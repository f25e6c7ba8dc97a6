"""Authentication exceptions.

These exceptions are raised by the gatehouse_auth package and should be
caught and handled by the application layer (AuthenticationService) or the
transport boundary.
"""

from collections.abc import Sequence


class AuthError(Exception):
    """Base exception for all authentication errors."""

    def __init__(self, message: str = "Authentication error"):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(AuthError):
    """Raised at startup for a missing secret or an unknown auth entity."""

    def __init__(self, message: str = "Invalid authentication configuration"):
        super().__init__(message)


class InvalidTokenError(AuthError):
    """Raised when a JWT token is invalid or malformed."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class ExpiredTokenError(InvalidTokenError):
    """Raised when a JWT token is well-formed but past its expiry."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)


class WeakPasswordError(AuthError):
    """Raised when a password doesn't meet strength requirements."""

    def __init__(
        self,
        errors: Sequence[str] | None = None,
        message: str = "Password does not meet requirements",
    ):
        self.errors = list(errors or [])
        if self.errors:
            message = f"Weak password: {', '.join(self.errors)}"
        super().__init__(message)


class InvalidCredentialsError(AuthError):
    """Raised when email or password is incorrect during login."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class AccountLockedError(AuthError):
    """Raised when an account is locked due to too many failed login attempts."""

    def __init__(self, minutes_remaining: int):
        self.minutes_remaining = minutes_remaining
        super().__init__(f"Account locked. Try again in {minutes_remaining} minutes")


class AccountNotActiveError(AuthError):
    """Raised when a non-active account tries to log in."""

    def __init__(self, message: str = "Account is not active"):
        super().__init__(message)


class SessionNotFoundError(AuthError):
    """Raised when a session id does not resolve to a stored session."""

    def __init__(self, session_id: object):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionEntityMismatchError(AuthError):
    """Raised when a session is used against a different auth entity."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Session belongs to '{actual}', not '{expected}'")


class SessionNotActiveError(AuthError):
    """Raised on an illegal transition of an inactive session."""

    def __init__(self, session_id: object):
        self.session_id = session_id
        super().__init__(f"Session is not active: {session_id}")
