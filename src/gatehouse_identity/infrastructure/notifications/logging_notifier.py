import logging

from gatehouse_identity.application.ports import IdentityNotifier

logger = logging.getLogger(__name__)


class LoggingIdentityNotifier(IdentityNotifier):
    """Notifier that only records that a message was queued.

    The secret itself is never logged.
    """

    def send_password_reset(self, email: str, token: str) -> None:
        logger.info("Password reset message queued for %s", email)

    def send_email_verification(self, email: str, code: str) -> None:
        logger.info("Email verification message queued for %s", email)
