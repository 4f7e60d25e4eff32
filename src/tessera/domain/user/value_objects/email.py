"""Email value object."""

import re
from dataclasses import dataclass

from tessera.domain.user.exceptions import InvalidEmailError

_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

MAX_EMAIL_LENGTH = 255


@dataclass(frozen=True)
class Email:
    """A validated email address, normalised to lower case."""

    value: str

    def __post_init__(self) -> None:
        normalized = self.value.strip().lower() if isinstance(self.value, str) else ""
        if not normalized or len(normalized) > MAX_EMAIL_LENGTH:
            msg = "Email address is empty or too long"
            raise InvalidEmailError(msg)
        if not _EMAIL_PATTERN.match(normalized):
            msg = f"Invalid email format: {self.value}"
            raise InvalidEmailError(msg)
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value
