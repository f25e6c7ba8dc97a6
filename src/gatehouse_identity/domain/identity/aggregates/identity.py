"""Identity aggregate: one authenticatable principal of one auth entity."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Union
from uuid import UUID, uuid4

from gatehouse_auth.time import utc_now
from gatehouse_identity.domain.identity.value_objects import Email, IdentityStatus
from gatehouse_identity.schemas import IdentityView


class Identity:
    """
    Identity aggregate root.

    Always carries the password hash; anything leaving the package goes
    through ``to_view()``.
    """

    def __init__(  # noqa: PLR0913, PLR0915
        self,
        email: Union[str, Email],
        password_hash: str,
        auth_entity: str,
        id: UUID | None = None,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        status: Union[str, IdentityStatus] = IdentityStatus.ACTIVE,
        role: str = "user",
        login_attempts: int = 0,
        locked_until: datetime | None = None,
        reset_token_hash: str | None = None,
        reset_token_expires_at: datetime | None = None,
        verification_code_hash: str | None = None,
        verification_code_expires_at: datetime | None = None,
        is_email_verified: bool = False,
        last_login_at: datetime | None = None,
        last_login_ip: str | None = None,
        last_user_agent: str | None = None,
        login_count: int = 0,
        extras: dict[str, Any] | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self._email = email if isinstance(email, Email) else Email(email)
        self._id = id or uuid4()
        self._password_hash = password_hash
        self._auth_entity = auth_entity
        self._username = username
        self._first_name = first_name
        self._last_name = last_name
        self._status = (
            status if isinstance(status, IdentityStatus) else IdentityStatus(status)
        )
        self._role = role
        self._login_attempts = login_attempts
        self._locked_until = locked_until
        self._reset_token_hash = reset_token_hash
        self._reset_token_expires_at = reset_token_expires_at
        self._verification_code_hash = verification_code_hash
        self._verification_code_expires_at = verification_code_expires_at
        self._is_email_verified = is_email_verified
        self._last_login_at = last_login_at
        self._last_login_ip = last_login_ip
        self._last_user_agent = last_user_agent
        self._login_count = login_count
        self._extras = dict(extras or {})
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or utc_now()

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def email(self) -> str:
        return self._email.value

    @property
    def password_hash(self) -> str:
        return self._password_hash

    @property
    def auth_entity(self) -> str:
        return self._auth_entity

    @property
    def username(self) -> str | None:
        return self._username

    @property
    def first_name(self) -> str | None:
        return self._first_name

    @property
    def last_name(self) -> str | None:
        return self._last_name

    @property
    def status(self) -> IdentityStatus:
        return self._status

    @property
    def is_active(self) -> bool:
        return self._status == IdentityStatus.ACTIVE

    @property
    def role(self) -> str:
        return self._role

    @property
    def login_attempts(self) -> int:
        return self._login_attempts

    @property
    def locked_until(self) -> datetime | None:
        return self._locked_until

    @property
    def reset_token_hash(self) -> str | None:
        return self._reset_token_hash

    @property
    def reset_token_expires_at(self) -> datetime | None:
        return self._reset_token_expires_at

    @property
    def verification_code_hash(self) -> str | None:
        return self._verification_code_hash

    @property
    def verification_code_expires_at(self) -> datetime | None:
        return self._verification_code_expires_at

    @property
    def is_email_verified(self) -> bool:
        return self._is_email_verified

    @property
    def last_login_at(self) -> datetime | None:
        return self._last_login_at

    @property
    def last_login_ip(self) -> str | None:
        return self._last_login_ip

    @property
    def last_user_agent(self) -> str | None:
        return self._last_user_agent

    @property
    def login_count(self) -> int:
        return self._login_count

    @property
    def extras(self) -> dict[str, Any]:
        return dict(self._extras)

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def is_locked(self, now: datetime | None = None) -> bool:
        """True while a lockout from failed logins is in force."""
        return self._locked_until is not None and self._locked_until > (
            now or utc_now()
        )

    def lock_minutes_remaining(self, now: datetime | None = None) -> int:
        """Whole minutes until the lockout ends, rounded up."""
        if self._locked_until is None:
            return 0
        seconds = (self._locked_until - (now or utc_now())).total_seconds()
        return max(0, math.ceil(seconds / 60))

    def has_valid_reset_token(self, now: datetime | None = None) -> bool:
        return (
            self._reset_token_hash is not None
            and self._reset_token_expires_at is not None
            and self._reset_token_expires_at > (now or utc_now())
        )

    def has_valid_verification_code(self, now: datetime | None = None) -> bool:
        return (
            self._verification_code_hash is not None
            and self._verification_code_expires_at is not None
            and self._verification_code_expires_at > (now or utc_now())
        )

    def to_view(self) -> IdentityView:
        return IdentityView(
            id=self._id,
            email=self.email,
            auth_entity=self._auth_entity,
            status=self._status.value,
            role=self._role,
            is_email_verified=self._is_email_verified,
            created_at=self._created_at,
            updated_at=self._updated_at,
            username=self._username,
            first_name=self._first_name,
            last_name=self._last_name,
            last_login_at=self._last_login_at,
            extras=self.extras,
        )

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        email: Union[str, Email],
        password_hash: str,
        auth_entity: str,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        role: str = "user",
        extras: dict[str, Any] | None = None,
    ) -> Identity:
        """New active identity with an unverified email."""
        return cls(
            email=email,
            password_hash=password_hash,
            auth_entity=auth_entity,
            username=username,
            first_name=first_name,
            last_name=last_name,
            status=IdentityStatus.ACTIVE,
            role=role,
            is_email_verified=False,
            extras=extras,
        )

    @classmethod
    def reconstitute(cls, **fields: Any) -> Identity:
        return cls(**fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Identity):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"Identity(id={self._id}, email={self._email.value}, "
            f"auth_entity={self._auth_entity})"
        )
