"""Auth entity registry.

Maps each configured auth entity to its identity table and the default
column values new identities of that entity receive. Resolution happens
once at startup; an unknown name is a configuration error.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from gatehouse_auth.exceptions import ConfigurationError
from gatehouse_identity.domain.identity import AuthEntity, IdentityRepository
from gatehouse_identity.infrastructure.persistence.sqlalchemy import (
    AdminModel,
    IdentityColumnsMixin,
    IdentityRepositorySQLAlchemy,
    UserModel,
    VendorModel,
)


@dataclass(frozen=True)
class EntityRegistration:
    """How one auth entity is stored."""

    auth_entity: AuthEntity
    model: type[IdentityColumnsMixin]
    defaults: dict[str, Any] = field(default_factory=dict)


DEFAULT_REGISTRATIONS: tuple[EntityRegistration, ...] = (
    EntityRegistration(AuthEntity.USERS, UserModel),
    EntityRegistration(AuthEntity.ADMINS, AdminModel, {"admin_level": 1}),
    EntityRegistration(AuthEntity.VENDORS, VendorModel, {"vendor_status": "pending"}),
)


@dataclass(frozen=True)
class ResolvedAuthEntity:
    """A registered auth entity, ready to build repositories."""

    auth_entity: AuthEntity
    model: type[IdentityColumnsMixin]
    defaults: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.auth_entity.value

    @property
    def table_name(self) -> str:
        return self.model.__tablename__  # type: ignore[attr-defined]

    def repository(self, session: AsyncSession) -> IdentityRepository:
        """Identity repository over this entity's table, bound to ``session``."""
        return IdentityRepositorySQLAlchemy(session, self.model, self.name)


class EntityResolver:
    """Registry of auth entities keyed by ``AuthEntity``."""

    def __init__(
        self,
        registrations: Iterable[EntityRegistration] = DEFAULT_REGISTRATIONS,
    ):
        self._registry = {reg.auth_entity: reg for reg in registrations}

    @property
    def registered(self) -> list[AuthEntity]:
        return list(self._registry)

    def resolve(self, name: str | AuthEntity) -> ResolvedAuthEntity:
        """
        Resolve an auth entity name.

        Parameters
        ----------
        name
            Entity name as configured, e.g. "users"

        Returns
        -------
        ResolvedAuthEntity for the entity

        Raises
        ------
        ConfigurationError
            If the name is unknown or has no registration
        """
        auth_entity = name if isinstance(name, AuthEntity) else AuthEntity.parse(name)

        registration = self._registry.get(auth_entity)
        if registration is None:
            msg = f"Auth entity '{auth_entity.value}' is not registered"
            raise ConfigurationError(msg)

        return ResolvedAuthEntity(
            auth_entity=registration.auth_entity,
            model=registration.model,
            defaults=dict(registration.defaults),
        )
