from gatehouse_identity.infrastructure.persistence.sqlalchemy.repositories.identity_repository import (  # noqa: E501
    IdentityRepositorySQLAlchemy,
)

__all__ = ["IdentityRepositorySQLAlchemy"]
