from enum import Enum


class IdentityStatus(str, Enum):
    """Account status. LOCKED is an administrative lock, unrelated to lockout."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    LOCKED = "locked"
