"""Permission entities package.

Domain entities and protocols for permission and role management.
"""

from .permission import Permission, PermissionCode
from .grant import (
    Grant,
    ExactGrant,
    ResourceWildcardGrant,
    GlobalWildcardGrant,
    GrantSet,
    GLOBAL_WILDCARD,
    parse_grant,
)
from .role import Role, RoleDraft, RolePermission, UserRole, ensure_id_list
from .audit import AuditAction, AuditEntity, AuditResult, PermissionAuditEntry
from .results import OperationResult
from .protocols import (
    PermissionStore,
    AuditStore,
    PrincipalProvider,
    SessionPrincipal,
)

__all__ = [
    # Domain entities
    "Permission",
    "PermissionCode",
    "Role",
    "RoleDraft",
    "RolePermission",
    "UserRole",
    "PermissionAuditEntry",

    # Grants
    "Grant",
    "ExactGrant",
    "ResourceWildcardGrant",
    "GlobalWildcardGrant",
    "GrantSet",
    "GLOBAL_WILDCARD",
    "parse_grant",

    # Results and enums
    "AuditAction",
    "AuditEntity",
    "AuditResult",
    "OperationResult",
    "ensure_id_list",

    # Protocols
    "PermissionStore",
    "AuditStore",
    "PrincipalProvider",
    "SessionPrincipal",
]
