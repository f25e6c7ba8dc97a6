"""Identity exceptions.

These exceptions are raised by the gatehouse_identity package. They share
the ``AuthError`` root with gatehouse_auth so the transport boundary can
handle both with a single ``except`` clause.
"""

from gatehouse_auth.exceptions import AuthError, InvalidTokenError


class InvalidEmailError(ValueError):
    """Raised when email format is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class EmailAlreadyRegisteredError(AuthError):
    """Email already registered in this auth entity."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("Email already registered")


class UsernameTakenError(AuthError):
    """Username already taken in this auth entity."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__("Username already taken")


class IdentityNotFoundError(AuthError):
    """Identity not found."""

    def __init__(self, identifier: object) -> None:
        self.identifier = identifier
        super().__init__(f"Identity not found: {identifier}")


class InvalidResetTokenError(InvalidTokenError):
    """Raised when a password reset token is invalid or expired."""

    def __init__(self, message: str = "Invalid or expired password reset token"):
        super().__init__(message)


class InvalidVerificationCodeError(InvalidTokenError):
    """Raised when an email verification code is invalid or expired."""

    def __init__(self, message: str = "Invalid or expired verification code"):
        super().__init__(message)
