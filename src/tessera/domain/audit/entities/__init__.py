from tessera.domain.audit.entities.audit_log import AuditAction, AuditLog

__all__ = ["AuditAction", "AuditLog"]
