"""SQLAlchemy implementation for gatehouse_auth persistence.

Provides:
- AuthBase: Declarative base shared by session and identity models
- SessionModel: SQLAlchemy model for the shared sessions table
- SessionRepositorySQLAlchemy: Session store implementation

Examples
--------
# In your Alembic env.py or migration setup:
from gatehouse_auth.persistence.sqlalchemy import AuthBase
target_metadata = AuthBase.metadata
"""

from gatehouse_auth.persistence.sqlalchemy.base import AuthBase
from gatehouse_auth.persistence.sqlalchemy.models import SessionModel
from gatehouse_auth.persistence.sqlalchemy.repositories import (
    SessionRepositorySQLAlchemy,
)

__all__ = [
    "AuthBase",
    "SessionModel",
    "SessionRepositorySQLAlchemy",
]
