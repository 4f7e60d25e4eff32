"""Application services."""

from tessera.application.services.audit_trail import AuditTrail
from tessera.application.services.authentication_service import (
    AuthenticationService,
)
from tessera.application.services.token_maintenance_service import (
    TokenMaintenanceService,
)

__all__ = [
    "AuditTrail",
    "AuthenticationService",
    "TokenMaintenanceService",
]
