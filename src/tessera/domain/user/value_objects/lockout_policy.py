from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class LockoutPolicy:
    """How many failed logins lock an account, and for how long."""

    max_attempts: int = 5
    lock_duration: timedelta = timedelta(minutes=15)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            msg = "max_attempts must be at least 1"
            raise ValueError(msg)
        if self.lock_duration <= timedelta(0):
            msg = "lock_duration must be positive"
            raise ValueError(msg)
