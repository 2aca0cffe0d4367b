"""Permission services package.

Resolution, caching, role management and audit services.
"""

from .permission_cache import PermissionCache, CacheEntry, DEFAULT_PERMISSION_TTL
from .resolver import PermissionResolver, ADMIN_PERMISSIONS, resolve_principal
from .audit_logger import AuditLogger
from .role_manager import RoleManager
from .permission_service import PermissionService, create_permission_service

__all__ = [
    "PermissionCache",
    "CacheEntry",
    "DEFAULT_PERMISSION_TTL",
    "PermissionResolver",
    "ADMIN_PERMISSIONS",
    "resolve_principal",
    "AuditLogger",
    "RoleManager",
    "PermissionService",
    "create_permission_service",
]
