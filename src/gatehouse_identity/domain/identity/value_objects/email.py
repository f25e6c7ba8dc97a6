"""Email address value object used as the login key of every identity."""

import re
from dataclasses import dataclass

from gatehouse_identity.exceptions import InvalidEmailError

# local@domain.tld, with a TLD of at least two letters
_ADDRESS_RE = re.compile(r"^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$")


def _normalize(raw: str) -> str:
    """Lowercase and strip an address without validating it."""
    return raw.strip().lower()


@dataclass(frozen=True)
class Email:
    """A normalized, syntactically valid email address.

    Two ``Email`` objects compare equal when their normalized forms match,
    so ``Email(" A@X.com ") == Email("a@x.com")``.

    Raises
    ------
    InvalidEmailError
        If the address is empty or not of the form ``local@domain.tld``.
    """

    value: str

    def __post_init__(self) -> None:
        candidate = _normalize(self.value or "")
        if not candidate:
            msg = "Email address is required"
            raise InvalidEmailError(msg)
        if _ADDRESS_RE.fullmatch(candidate) is None:
            msg = f"Invalid email format: {self.value!r}"
            raise InvalidEmailError(msg)
        object.__setattr__(self, "value", candidate)

    @property
    def local_part(self) -> str:
        return self.value.partition("@")[0]

    @property
    def domain(self) -> str:
        return self.value.partition("@")[2]

    def __str__(self) -> str:
        return self.value
