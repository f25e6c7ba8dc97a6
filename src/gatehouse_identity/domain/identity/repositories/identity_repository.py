"""Identity repository interface.

One implementation instance serves one auth entity (one table). Email
arguments accept raw strings; implementations normalize them through the
``Email`` value object.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from gatehouse_identity.domain.identity.aggregates.identity import Identity
from gatehouse_identity.domain.identity.value_objects.email import Email


class IdentityRepository(ABC):
    """Repository interface for Identity aggregates of one auth entity."""

    @property
    @abstractmethod
    def auth_entity(self) -> str:
        """The auth entity this repository serves."""

    @abstractmethod
    async def find_by_id(self, identity_id: UUID) -> Optional[Identity]:
        """Find an identity by its ID."""

    @abstractmethod
    async def find_by_email(self, email: Union[str, Email]) -> Optional[Identity]:
        """Find an identity by email address, password hash included."""

    @abstractmethod
    async def find_by_username(self, username: str) -> Optional[Identity]:
        """Find an identity by username."""

    @abstractmethod
    async def find_by_reset_token_hash(self, token_hash: str) -> Optional[Identity]:
        """Find the identity holding a password reset token hash."""

    @abstractmethod
    async def find_by_verification_code_hash(
        self,
        code_hash: str,
    ) -> Optional[Identity]:
        """Find the identity holding an email verification code hash."""

    @abstractmethod
    async def email_exists(self, email: Union[str, Email]) -> bool:
        """Check if an identity exists with the given email."""

    @abstractmethod
    async def username_exists(self, username: str) -> bool:
        """Check if an identity exists with the given username."""

    @abstractmethod
    async def create(self, identity: Identity) -> Identity:
        """
        Insert a new identity.

        Raises
        ------
        EmailAlreadyRegisteredError
            If the email is already stored
        UsernameTakenError
            If the username is already stored
        """

    @abstractmethod
    async def update_profile(
        self,
        identity_id: UUID,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Optional[Identity]:
        """Update the given profile fields; None leaves a field unchanged."""

    @abstractmethod
    async def increment_login_attempts(
        self,
        identity_id: UUID,
        max_attempts: int,
        lock_minutes: int,
    ) -> int:
        """
        Count one failed login.

        Sets ``locked_until`` to now plus ``lock_minutes`` once the
        attempt count reaches ``max_attempts``.

        Returns
        -------
        The new number of failed attempts
        """

    @abstractmethod
    async def record_successful_login(
        self,
        identity_id: UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Reset attempts, clear the lockout, stamp the login and bump the count."""

    @abstractmethod
    async def update_password(self, identity_id: UUID, password_hash: str) -> None:
        """Store a new password hash."""

    @abstractmethod
    async def set_reset_token(
        self,
        identity_id: UUID,
        token_hash: str | None,
        expires_at: datetime | None,
    ) -> None:
        """Store or clear (with None) the password reset token hash."""

    @abstractmethod
    async def set_verification_code(
        self,
        identity_id: UUID,
        code_hash: str | None,
        expires_at: datetime | None,
    ) -> None:
        """Store or clear (with None) the email verification code hash."""

    @abstractmethod
    async def mark_email_verified(self, identity_id: UUID) -> None:
        """Mark the email verified and clear the verification code."""
