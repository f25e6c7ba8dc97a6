"""Outbound notification port.

Delivery mechanics live outside this package; the authentication service
only hands raw one-time secrets to whatever implements this interface.
"""

from abc import ABC, abstractmethod


class IdentityNotifier(ABC):
    """Delivers password reset tokens and email verification codes."""

    @abstractmethod
    def send_password_reset(self, email: str, token: str) -> None:
        """Deliver a raw password reset token to ``email``."""

    @abstractmethod
    def send_email_verification(self, email: str, code: str) -> None:
        """Deliver a raw email verification code to ``email``."""
