from __future__ import annotations

from enum import Enum

from gatehouse_auth.exceptions import ConfigurationError


class AuthEntity(str, Enum):
    """Kinds of principal that can authenticate, one table each."""

    USERS = "users"
    ADMINS = "admins"
    VENDORS = "vendors"

    @classmethod
    def parse(cls, name: str) -> AuthEntity:
        """Parse a configured entity name.

        Raises
        ------
        ConfigurationError
            If the name is not a known auth entity
        """
        try:
            return cls(name.strip().lower())
        except ValueError as e:
            known = ", ".join(entity.value for entity in cls)
            msg = f"Unknown auth entity '{name}' (expected one of: {known})"
            raise ConfigurationError(msg) from e
