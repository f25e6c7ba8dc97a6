from gatehouse_identity.domain.identity.aggregates.identity import Identity

__all__ = ["Identity"]
