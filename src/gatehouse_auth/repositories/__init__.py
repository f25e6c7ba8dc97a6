"""Abstract repository interfaces for auth persistence.

These define the contracts that persistence implementations must fulfill.
"""

from gatehouse_auth.repositories.session_repository import (
    SessionRepository,
    SessionStats,
)

__all__ = [
    "SessionRepository",
    "SessionStats",
]
