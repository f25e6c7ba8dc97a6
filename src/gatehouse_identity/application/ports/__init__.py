from gatehouse_identity.application.ports.notifier import IdentityNotifier

__all__ = ["IdentityNotifier"]
