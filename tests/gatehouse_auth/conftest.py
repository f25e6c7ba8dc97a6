"""
Pytest configuration for gatehouse_auth tests.

Re-exports the shared database fixtures: ``db_session`` (SQLite) for
unit-level persistence tests and ``pg_session`` (Testcontainers
PostgreSQL) for integration tests.
"""

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
