"""
Permission Service for orbis-access

Facade over the resolver, cache, role manager and audit logger, wired from a
single store and settings object.
"""
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from ....config import AccessSettings, get_settings
from ....core.exceptions import OrbisAccessError
from ..entities import (
    AuditStore,
    OperationResult,
    Permission,
    PermissionAuditEntry,
    PermissionStore,
    PrincipalProvider,
    Role,
    RoleDraft,
    SessionPrincipal,
)
from .audit_logger import AuditLogger
from .permission_cache import Clock, PermissionCache
from .resolver import PermissionResolver, resolve_principal
from .role_manager import RoleManager

logger = logging.getLogger(__name__)


class PermissionService:
    """Single entry point for permission checks and role administration."""

    def __init__(
        self,
        resolver: PermissionResolver,
        role_manager: RoleManager,
        audit_logger: AuditLogger,
        cache: PermissionCache,
        principal_provider: Optional[PrincipalProvider] = None
    ):
        self.resolver = resolver
        self.role_manager = role_manager
        self.audit_logger = audit_logger
        self.cache = cache
        self.principal_provider = principal_provider

    async def initialize(self, user_id: str) -> List[str]:
        """
        Bind the session principal and warm its permission set.

        Returns:
            The principal's permission codes
        """
        principal = resolve_principal(user_id, None)
        if isinstance(self.principal_provider, SessionPrincipal):
            self.principal_provider.bind(principal)
        permissions = await self.get_user_permissions(principal)
        logger.info(f"Permission service initialized for user {principal} with {len(permissions)} permissions")
        return permissions

    # Checks

    async def has_permission(self, permission: str, user_id: Optional[str] = None) -> bool:
        return await self.resolver.has_permission(user_id, permission)

    async def has_any_permission(self, permissions: Sequence[str], user_id: Optional[str] = None) -> bool:
        return await self.resolver.has_any_permission(user_id, permissions)

    async def has_all_permissions(self, permissions: Sequence[str], user_id: Optional[str] = None) -> bool:
        return await self.resolver.has_all_permissions(user_id, permissions)

    async def is_admin(self, user_id: Optional[str] = None) -> bool:
        return await self.resolver.is_admin(user_id)

    async def is_super_admin(self, user_id: Optional[str] = None) -> bool:
        return await self.resolver.is_super_admin(user_id)

    async def has_role(self, role_name: str, user_id: Optional[str] = None) -> bool:
        return await self.resolver.has_role(user_id, role_name)

    async def get_user_permissions(self, user_id: Optional[str] = None) -> List[str]:
        """Effective permission codes of a principal, sorted."""
        grants = await self.resolver.get_permission_set(user_id)
        return grants.codes()

    # Read projections

    async def get_roles(self) -> List[Role]:
        return await self.role_manager.get_roles()

    async def get_role(self, role_ref: str) -> Optional[Role]:
        return await self.role_manager.get_role(role_ref)

    async def get_user_roles(self, user_id: Optional[str] = None) -> List[Role]:
        return await self.role_manager.get_user_roles(user_id)

    async def get_all_permissions(self) -> List[Permission]:
        return await self.role_manager.get_all_permissions()

    async def get_audit_log(self, limit: Optional[int] = None) -> List[PermissionAuditEntry]:
        """Most recent audit entries, newest first; empty if the sink fails."""
        try:
            return await self.audit_logger.recent_entries(limit)
        except OrbisAccessError as e:
            logger.error(f"Failed to read audit log: {e.message}")
            return []

    # Mutations

    async def create_role(self, draft: Union[RoleDraft, Dict[str, Any]]) -> OperationResult:
        return await self.role_manager.create_role(draft)

    async def update_role_permissions(self, role_id: str, permission_ids: List[str]) -> OperationResult:
        return await self.role_manager.update_role_permissions(role_id, permission_ids)

    async def assign_roles_to_user(self, user_id: str, role_ids: List[str]) -> OperationResult:
        return await self.role_manager.assign_roles_to_user(user_id, role_ids)

    async def delete_role(self, role_id: str) -> OperationResult:
        return await self.role_manager.delete_role(role_id)

    # Cache

    def clear_cache(self, user_id: Optional[str] = None) -> None:
        """Drop one principal's cached set, or every set when no user is given."""
        if user_id is None:
            self.cache.invalidate_all()
        else:
            self.cache.invalidate(user_id)

    def cache_stats(self) -> Dict[str, Any]:
        return self.cache.stats()

    async def close(self) -> None:
        self.cache.close()
        if isinstance(self.principal_provider, SessionPrincipal):
            self.principal_provider.clear()
        logger.info("Permission service closed")


def create_permission_service(
    store: PermissionStore,
    audit_store: Optional[AuditStore] = None,
    principal_provider: Optional[PrincipalProvider] = None,
    settings: Optional[AccessSettings] = None,
    cache_ttl: Optional[float] = None,
    clock: Optional[Clock] = None,
    origin: Optional[Callable[[], Optional[str]]] = None
) -> PermissionService:
    """
    Wire a PermissionService.

    Args:
        store: Permission store; also the audit sink unless ``audit_store`` is given
        audit_store: Optional separate audit sink
        principal_provider: Identity collaborator; a SessionPrincipal is created if omitted
        settings: Optional settings override
        cache_ttl: Cache TTL in seconds, defaults to ``permission_cache_ttl``
        clock: Monotonic clock for the cache
        origin: Returns the request origin address for audit entries
    """
    settings = settings or get_settings()
    principal_provider = principal_provider or SessionPrincipal()

    cache_kwargs: Dict[str, Any] = {"ttl": cache_ttl or settings.permission_cache_ttl}
    if clock is not None:
        cache_kwargs["clock"] = clock
    cache = PermissionCache(**cache_kwargs)

    audit_logger = AuditLogger(
        audit_store or store,
        principal_provider=principal_provider,
        origin=origin,
        settings=settings,
    )
    resolver = PermissionResolver(store, cache, principal_provider)
    role_manager = RoleManager(store, cache, audit_logger, principal_provider, settings)

    return PermissionService(resolver, role_manager, audit_logger, cache, principal_provider)
