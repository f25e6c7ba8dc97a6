from gatehouse_identity.application.factories.auth_factory import AuthServiceFactory

__all__ = ["AuthServiceFactory"]
