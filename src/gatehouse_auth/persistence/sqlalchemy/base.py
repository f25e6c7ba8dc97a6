"""SQLAlchemy declarative base for gatehouse models.

Identity tables (gatehouse_identity) register on the same metadata so a
single ``create_all`` or Alembic target covers every table.
"""

from sqlalchemy.orm import DeclarativeBase


class AuthBase(DeclarativeBase):
    """Declarative base for gatehouse_auth and gatehouse_identity models."""
