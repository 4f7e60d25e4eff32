from dataclasses import dataclass


@dataclass(frozen=True)
class CleanupReport:
    """Rows removed by one maintenance run."""

    expired_refresh_tokens: int
    expired_blacklist_entries: int
    purged_audit_logs: int

    @property
    def total(self) -> int:
        return (
            self.expired_refresh_tokens
            + self.expired_blacklist_entries
            + self.purged_audit_logs
        )
