"""Persistence implementations for gatehouse_auth.

This package contains database-specific implementations of the
repository interfaces defined in gatehouse_auth.repositories.

Structure:
    persistence/
    └── sqlalchemy/     # SQLAlchemy/SQL database implementation

Usage:
    from gatehouse_auth.persistence.sqlalchemy import (
        SessionRepositorySQLAlchemy,
        SessionModel,
        AuthBase,
    )
"""
