"""Abstract repository interface for sessions.

This interface defines the contract for session persistence. It carries
no business rules: the single-session policy and token checks live in
SessionService. Implementations propagate storage errors unmodified.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from gatehouse_auth.session import Session


@dataclass(frozen=True)
class SessionStats:
    """Aggregate counts over active sessions."""

    total_active: int
    unique_users: int
    by_entity: dict[str, int] = field(default_factory=dict)


class SessionRepository(ABC):
    """
    Abstract repository interface for session records.

    Sessions of every auth entity share this store. Implementations must
    only ever treat rows with the active flag set as live.
    """

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """
        Persist a new session.

        Parameters
        ----------
        session
            The session to store; its id is already assigned

        Returns
        -------
        The stored session
        """

    @abstractmethod
    async def find_by_id(self, session_id: UUID) -> Session | None:
        """Find a session by id regardless of its state."""

    @abstractmethod
    async def find_active_by_id(self, session_id: UUID) -> Session | None:
        """Find a session by id if it is active."""

    @abstractmethod
    async def find_active_by_email_and_entity(
        self,
        email: str,
        auth_entity: str,
    ) -> Session | None:
        """Find the active session for an (email, auth entity) pair."""

    @abstractmethod
    async def find_by_refresh_token(self, refresh_token: str) -> Session | None:
        """
        Find a session by its raw refresh token string.

        Active and inactive sessions both match; the caller decides
        whether the session is usable.
        """

    @abstractmethod
    async def deactivate_all_for_email_in_entity(
        self,
        email: str,
        auth_entity: str,
    ) -> None:
        """Deactivate every active session of an email in one auth entity."""

    @abstractmethod
    async def deactivate_all_for_email(self, email: str) -> None:
        """Deactivate every active session of an email in all auth entities."""

    @abstractmethod
    async def deactivate(self, session_id: UUID) -> None:
        """Deactivate a single session."""

    @abstractmethod
    async def update_tokens(  # noqa: PLR0913
        self,
        session_id: UUID,
        access_token: str,
        refresh_token: str | None = None,
        access_expires_at: datetime | None = None,
        refresh_expires_at: datetime | None = None,
    ) -> None:
        """
        Replace the stored tokens of a session.

        A new refresh expiry also moves the overall session expiry.
        """

    @abstractmethod
    async def update_activity(
        self,
        session_id: UUID,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Bump the last activity timestamp and optionally client details."""

    @abstractmethod
    async def list_active_for_email(self, email: str) -> list[Session]:
        """List active sessions of an email across entities."""

    @abstractmethod
    async def list_active_for_email_in_entity(
        self,
        email: str,
        auth_entity: str,
    ) -> list[Session]:
        """List active sessions of an email in one entity, newest activity first."""

    @abstractmethod
    async def has_active_session(self, email: str, auth_entity: str) -> bool:
        """Check whether the pair currently has an active session."""

    @abstractmethod
    async def is_owned_by(
        self,
        session_id: UUID,
        email: str,
        auth_entity: str,
    ) -> bool:
        """Check that an active session belongs to the given email and entity."""

    @abstractmethod
    async def purge_expired(self) -> int:
        """
        Delete sessions whose overall expiry has passed.

        Returns
        -------
        Number of sessions deleted
        """

    @abstractmethod
    async def purge_inactive_older_than(self, days: int) -> int:
        """
        Delete inactive sessions idle for more than ``days`` days.

        Returns
        -------
        Number of sessions deleted
        """

    @abstractmethod
    async def count_active_by_entity(self, auth_entity: str) -> int:
        """Count active sessions of one auth entity."""

    @abstractmethod
    async def stats(self, auth_entity: str | None = None) -> SessionStats:
        """Summarize active sessions, optionally for one auth entity."""
