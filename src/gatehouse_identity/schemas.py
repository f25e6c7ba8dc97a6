"""Identity schemas and data structures.

These are simple data classes used for transferring identity
data out of the package. None of them carry secrets.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class IdentityView:
    """Sanitized identity.

    Omits the password hash, reset and verification secrets, login
    counters, lockout state and client details.
    """

    id: UUID
    email: str
    auth_entity: str
    status: str
    role: str
    is_email_verified: bool
    created_at: datetime
    updated_at: datetime
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    last_login_at: datetime | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "email": self.email,
            "auth_entity": self.auth_entity,
            "status": self.status,
            "role": self.role,
            "is_email_verified": self.is_email_verified,
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "last_login_at": (
                self.last_login_at.isoformat() if self.last_login_at else None
            ),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            **self.extras,
        }
