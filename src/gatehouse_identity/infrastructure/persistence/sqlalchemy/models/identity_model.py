"""SQLAlchemy models for the per-entity identity tables.

Every auth entity has its own table with the same identity columns
plus a few entity-specific ones listed in ``EXTRA_FIELDS``.
"""

from datetime import datetime
from typing import ClassVar
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from gatehouse_auth.persistence.sqlalchemy.base import AuthBase
from gatehouse_auth.time import utc_now


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps (utc_now)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


class IdentityColumnsMixin(TimestampMixin):
    """Columns shared by every identity table."""

    EXTRA_FIELDS: ClassVar[tuple[str, ...]] = ()

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    username: Mapped[str | None] = mapped_column(
        String(100),
        unique=True,
        nullable=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)
    role: Mapped[str] = mapped_column(String(50), default="user", nullable=False)

    login_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    locked_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    reset_token_hash: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        index=True,
    )
    reset_token_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    verification_code_hash: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        index=True,
    )
    verification_code_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    is_email_verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    last_login_ip: Mapped[str | None] = mapped_column(String(45), nullable=True)
    last_user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    login_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, email={self.email})>"


class UserModel(AuthBase, IdentityColumnsMixin):
    """Identities of the ``users`` auth entity."""

    __tablename__ = "users"


class AdminModel(AuthBase, IdentityColumnsMixin):
    """Identities of the ``admins`` auth entity."""

    __tablename__ = "admins"

    EXTRA_FIELDS: ClassVar[tuple[str, ...]] = ("admin_level",)

    admin_level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)


class VendorModel(AuthBase, IdentityColumnsMixin):
    """Identities of the ``vendors`` auth entity."""

    __tablename__ = "vendors"

    EXTRA_FIELDS: ClassVar[tuple[str, ...]] = ("vendor_status",)

    vendor_status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        nullable=False,
    )

