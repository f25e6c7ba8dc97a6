"""Shared pytest fixtures for all test domains."""

from tests.shared.fixtures.database import (
    db_session,
    pg_session,
    postgres_container,
    sqlite_engine,
)

__all__ = [
    "db_session",
    "pg_session",
    "postgres_container",
    "sqlite_engine",
]
