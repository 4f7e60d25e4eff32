"""Domain layer: user identity, lockout policy and the audit trail."""
