"""Audit domain: append-only trail of security events."""

from tessera.domain.audit.entities import AuditAction, AuditLog
from tessera.domain.audit.repositories import AuditLogRepository

__all__ = ["AuditAction", "AuditLog", "AuditLogRepository"]
