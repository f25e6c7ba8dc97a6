"""Input and output data for the authentication service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from gatehouse_auth import DeviceInfo, SessionView, TokenPair
from gatehouse_identity.schemas import IdentityView


@dataclass(frozen=True)
class RegistrationData:
    email: str
    password: str
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None


@dataclass(frozen=True)
class LoginData:
    email: str
    password: str
    ip_address: str | None = None
    user_agent: str | None = None
    device_name: str | None = None
    device_type: str | None = None

    def to_device(self) -> DeviceInfo:
        return DeviceInfo(
            ip_address=self.ip_address,
            user_agent=self.user_agent,
            device_name=self.device_name,
            device_type=self.device_type,
        )


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a registration; session and tokens only when a device was given."""

    identity: IdentityView
    auth_entity: str
    password_score: int
    session: SessionView | None = None
    tokens: TokenPair | None = None


@dataclass(frozen=True)
class LoginResult:
    identity: IdentityView
    session: SessionView
    tokens: TokenPair
    auth_entity: str


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Identity behind a valid access token."""

    identity: IdentityView
    session: SessionView
    identity_id: UUID
    session_id: UUID
    email: str
    auth_entity: str
    role: str | None = None


@dataclass(frozen=True)
class IdentityProfile:
    identity: IdentityView
    has_active_session: bool
    total_active_sessions: int
    auth_entity: str


@dataclass(frozen=True)
class ModuleInfo:
    """Static description of the auth module bound to one entity."""

    auth_entity: str
    table_name: str
    max_login_attempts: int
    lock_duration_minutes: int
    defaults: dict[str, Any] = field(default_factory=dict)
