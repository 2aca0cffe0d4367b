"""orbis-access - role-based access control engine.

Permission resolution with wildcard grants, a TTL permission cache, role and
assignment management, and an audit trail for permission mutations.
"""

from .__version__ import __version__

from .config import AccessSettings, get_settings, setup_logging
from .core.exceptions import (
    OrbisAccessError,
    ConfigurationError,
    ValidationError,
    NotFoundError,
    RoleNotFoundError,
    PermissionNotFoundError,
    ProtectedResourceError,
    StoreError,
    TransactionError,
)
from .database import DatabaseManager
from .features.permissions import (
    Permission,
    PermissionCode,
    GrantSet,
    Role,
    RoleDraft,
    PermissionAuditEntry,
    OperationResult,
    SessionPrincipal,
    PermissionCache,
    PermissionResolver,
    AuditLogger,
    RoleManager,
    PermissionService,
    create_permission_service,
    AsyncPGPermissionStore,
    MemoryPermissionStore,
)

__all__ = [
    "__version__",

    # Configuration
    "AccessSettings",
    "get_settings",
    "setup_logging",

    # Exceptions
    "OrbisAccessError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "RoleNotFoundError",
    "PermissionNotFoundError",
    "ProtectedResourceError",
    "StoreError",
    "TransactionError",

    # Infrastructure
    "DatabaseManager",

    # Permissions
    "Permission",
    "PermissionCode",
    "GrantSet",
    "Role",
    "RoleDraft",
    "PermissionAuditEntry",
    "OperationResult",
    "SessionPrincipal",
    "PermissionCache",
    "PermissionResolver",
    "AuditLogger",
    "RoleManager",
    "PermissionService",
    "create_permission_service",
    "AsyncPGPermissionStore",
    "MemoryPermissionStore",
]
