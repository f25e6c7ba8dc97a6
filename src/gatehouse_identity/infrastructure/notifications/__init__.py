from gatehouse_identity.infrastructure.notifications.logging_notifier import (
    LoggingIdentityNotifier,
)

__all__ = ["LoggingIdentityNotifier"]
