"""Session entity.

A session is one logged-in client of one identity in one auth entity. It
holds the currently valid token pair. Sessions move ACTIVE -> INACTIVE
only; an inactive session is never resurrected.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any
from uuid import UUID

from gatehouse_auth.exceptions import SessionNotActiveError
from gatehouse_auth.schemas import TokenPair
from gatehouse_auth.time import utc_now


class SessionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class DeviceInfo:
    """Client details captured when a session is opened."""

    ip_address: str | None = None
    user_agent: str | None = None
    device_name: str | None = None
    device_type: str | None = None


@dataclass(frozen=True)
class SessionView:
    """Session data that is safe to expose: no token strings."""

    id: UUID
    identity_id: UUID
    email: str
    auth_entity: str
    is_active: bool
    access_expires_at: datetime
    refresh_expires_at: datetime
    expires_at: datetime
    last_activity_at: datetime
    created_at: datetime
    device_name: str | None = None
    device_type: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "identity_id": str(self.identity_id),
            "email": self.email,
            "auth_entity": self.auth_entity,
            "is_active": self.is_active,
            "access_expires_at": self.access_expires_at.isoformat(),
            "refresh_expires_at": self.refresh_expires_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "last_activity_at": self.last_activity_at.isoformat(),
            "created_at": self.created_at.isoformat(),
            "device_name": self.device_name,
            "device_type": self.device_type,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "metadata": dict(self.metadata),
        }


class Session:
    """Session entity with guarded state transitions."""

    def __init__(  # noqa: PLR0913
        self,
        id: UUID,
        identity_id: UUID,
        email: str,
        auth_entity: str,
        access_token: str,
        refresh_token: str,
        access_expires_at: datetime,
        refresh_expires_at: datetime,
        status: SessionStatus = SessionStatus.ACTIVE,
        expires_at: datetime | None = None,
        last_activity_at: datetime | None = None,
        created_at: datetime | None = None,
        role: str | None = None,
        device: DeviceInfo | None = None,
        metadata: dict[str, Any] | None = None,
    ):
        now = utc_now()
        device = device or DeviceInfo()
        self._id = id
        self._identity_id = identity_id
        self._email = email
        self._auth_entity = auth_entity
        self._access_token = access_token
        self._refresh_token = refresh_token
        self._access_expires_at = access_expires_at
        self._refresh_expires_at = refresh_expires_at
        self._expires_at = expires_at or refresh_expires_at
        self._status = status
        self._last_activity_at = last_activity_at or now
        self._created_at = created_at or now
        self._role = role
        self._device_name = device.device_name
        self._device_type = device.device_type
        self._ip_address = device.ip_address
        self._user_agent = device.user_agent
        self._metadata = dict(metadata or {})

    @classmethod
    def open(  # noqa: PLR0913
        cls,
        session_id: UUID,
        identity_id: UUID,
        email: str,
        auth_entity: str,
        tokens: TokenPair,
        role: str | None = None,
        device: DeviceInfo | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Session:
        """Start a new ACTIVE session around an issued token pair."""
        return cls(
            id=session_id,
            identity_id=identity_id,
            email=email,
            auth_entity=auth_entity,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            access_expires_at=tokens.access_expires_at,
            refresh_expires_at=tokens.refresh_expires_at,
            role=role,
            device=device,
            metadata=metadata,
        )

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def identity_id(self) -> UUID:
        return self._identity_id

    @property
    def email(self) -> str:
        return self._email

    @property
    def auth_entity(self) -> str:
        return self._auth_entity

    @property
    def access_token(self) -> str:
        return self._access_token

    @property
    def refresh_token(self) -> str:
        return self._refresh_token

    @property
    def access_expires_at(self) -> datetime:
        return self._access_expires_at

    @property
    def refresh_expires_at(self) -> datetime:
        return self._refresh_expires_at

    @property
    def expires_at(self) -> datetime:
        return self._expires_at

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_active(self) -> bool:
        return self._status == SessionStatus.ACTIVE

    @property
    def last_activity_at(self) -> datetime:
        return self._last_activity_at

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def role(self) -> str | None:
        return self._role

    @property
    def device(self) -> DeviceInfo:
        return DeviceInfo(
            ip_address=self._ip_address,
            user_agent=self._user_agent,
            device_name=self._device_name,
            device_type=self._device_type,
        )

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._metadata)

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or utc_now()) >= self._expires_at

    def is_refresh_token_valid(self, now: datetime | None = None) -> bool:
        return (now or utc_now()) < self._refresh_expires_at

    def is_valid(self, now: datetime | None = None) -> bool:
        """Active and not past its overall expiry."""
        return self.is_active and not self.is_expired(now)

    def needs_token_refresh(
        self,
        minutes_before: int = 15,
        now: datetime | None = None,
    ) -> bool:
        """True when the access token expires within ``minutes_before``."""
        remaining = self._access_expires_at - (now or utc_now())
        return remaining <= timedelta(minutes=minutes_before)

    def deactivate(self) -> None:
        """Move to INACTIVE. Deactivating twice is a no-op."""
        if self._status == SessionStatus.INACTIVE:
            return
        self._status = SessionStatus.INACTIVE
        self._last_activity_at = utc_now()

    def rotate_tokens(self, tokens: TokenPair) -> None:
        """Replace both tokens; the old refresh token stops matching."""
        self._require_active()
        self._access_token = tokens.access_token
        self._refresh_token = tokens.refresh_token
        self._access_expires_at = tokens.access_expires_at
        self._refresh_expires_at = tokens.refresh_expires_at
        self._expires_at = tokens.refresh_expires_at
        self._last_activity_at = utc_now()

    def touch(self, ip_address: str | None = None, user_agent: str | None = None) -> None:
        self._require_active()
        self._last_activity_at = utc_now()
        if ip_address:
            self._ip_address = ip_address
        if user_agent:
            self._user_agent = user_agent

    def to_view(self) -> SessionView:
        return SessionView(
            id=self._id,
            identity_id=self._identity_id,
            email=self._email,
            auth_entity=self._auth_entity,
            is_active=self.is_active,
            access_expires_at=self._access_expires_at,
            refresh_expires_at=self._refresh_expires_at,
            expires_at=self._expires_at,
            last_activity_at=self._last_activity_at,
            created_at=self._created_at,
            device_name=self._device_name,
            device_type=self._device_type,
            ip_address=self._ip_address,
            user_agent=self._user_agent,
            metadata=self.metadata,
        )

    def _require_active(self) -> None:
        if self._status != SessionStatus.ACTIVE:
            raise SessionNotActiveError(self._id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Session):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"Session(id={self._id}, email={self._email}, "
            f"auth_entity={self._auth_entity}, status={self._status.value})"
        )
