"""Audit trail entities for permission mutations.

Maps to the append-only ``permission_audit_log`` table.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class AuditAction(str, Enum):
    """Mutating actions recorded in the audit trail."""
    ROLE_CREATE = "role_create"
    ROLE_PERMISSIONS_UPDATED = "role_permissions_updated"
    USER_ROLES_ASSIGNED = "user_roles_assigned"
    ROLE_DELETE = "role_delete"


class AuditEntity(str, Enum):
    """Entity types an audit entry can refer to."""
    ROLE = "role"
    USER = "user"


@dataclass(frozen=True)
class PermissionAuditEntry:
    """One append-only audit row. ``details`` holds serialized JSON."""

    id: str
    action: str
    entity_type: str
    entity_id: str
    target_id: Optional[str]
    performed_by: Optional[str]
    details: Optional[str]
    ip_address: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class AuditResult:
    """Outcome of an audit write. Callers log it; it never raises."""

    recorded: bool
    entry_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, entry_id: str) -> "AuditResult":
        return cls(recorded=True, entry_id=entry_id)

    @classmethod
    def failed(cls, error: str) -> "AuditResult":
        return cls(recorded=False, error=error)
