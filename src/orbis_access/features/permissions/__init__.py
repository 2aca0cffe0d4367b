"""Permissions feature for orbis-access.

Feature-First architecture for permission and role management:
- entities/: Permission codes, grants, roles, audit entries and protocols
- services/: Resolution, caching, role management and audit logging
- repositories/: asyncpg and in-memory stores
"""

from .entities import (
    Permission,
    PermissionCode,
    GrantSet,
    Role,
    RoleDraft,
    PermissionAuditEntry,
    AuditAction,
    AuditResult,
    OperationResult,
    PermissionStore,
    AuditStore,
    PrincipalProvider,
    SessionPrincipal,
)

from .services import (
    PermissionCache,
    PermissionResolver,
    AuditLogger,
    RoleManager,
    PermissionService,
    create_permission_service,
)

from .repositories import AsyncPGPermissionStore, MemoryPermissionStore

__all__ = [
    # Entities
    "Permission",
    "PermissionCode",
    "GrantSet",
    "Role",
    "RoleDraft",
    "PermissionAuditEntry",
    "AuditAction",
    "AuditResult",
    "OperationResult",

    # Protocols
    "PermissionStore",
    "AuditStore",
    "PrincipalProvider",
    "SessionPrincipal",

    # Services
    "PermissionCache",
    "PermissionResolver",
    "AuditLogger",
    "RoleManager",
    "PermissionService",
    "create_permission_service",

    # Repository Implementations
    "AsyncPGPermissionStore",
    "MemoryPermissionStore",
]
