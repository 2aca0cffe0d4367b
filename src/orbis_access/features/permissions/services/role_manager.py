"""Role and assignment management.

Every mutation is a single transition: store write, then audit write, then
cache invalidation. Writes report failures as OperationResult values.
"""

import logging
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from ....config import AccessSettings, get_settings
from ....core.exceptions import (
    OrbisAccessError,
    ProtectedResourceError,
    RoleNotFoundError,
    StoreError,
    ValidationError,
)
from ..entities import (
    AuditAction,
    AuditEntity,
    AuditResult,
    OperationResult,
    Permission,
    PermissionStore,
    PrincipalProvider,
    Role,
    RoleDraft,
    ensure_id_list,
)
from .audit_logger import AuditLogger
from .permission_cache import PermissionCache
from .resolver import resolve_principal

logger = logging.getLogger(__name__)


def as_access_error(exc: Exception) -> OrbisAccessError:
    """Pass access errors through; anything else raised by a store becomes a StoreError."""
    if isinstance(exc, OrbisAccessError):
        return exc
    return StoreError(f"Unexpected store failure: {exc}")


class RoleManager:
    """Creates, updates, deletes and assigns roles."""

    def __init__(
        self,
        store: PermissionStore,
        cache: PermissionCache,
        audit_logger: AuditLogger,
        principal_provider: Optional[PrincipalProvider] = None,
        settings: Optional[AccessSettings] = None
    ):
        self.store = store
        self.cache = cache
        self.audit_logger = audit_logger
        self.principal_provider = principal_provider
        self.settings = settings or get_settings()

    def _actor(self) -> Optional[str]:
        if self.principal_provider is None:
            return None
        return self.principal_provider.current_user_id()

    async def _audit(
        self,
        action: AuditAction,
        entity_type: AuditEntity,
        entity_id: str,
        details: Dict[str, Any]
    ) -> AuditResult:
        result = await self.audit_logger.log_permission_audit(
            action.value, entity_type.value, entity_id, None, details, performed_by=self._actor()
        )
        if not result.recorded:
            logger.error(f"Audit entry {action.value} for {entity_type.value} {entity_id} not recorded: {result.error}")
        return result

    # Mutations

    async def create_role(self, draft: Union[RoleDraft, Dict[str, Any]]) -> OperationResult:
        """
        Create a custom role, optionally with an initial permission set.

        The role is never a system role. Writes one role_create audit entry.
        """
        try:
            if isinstance(draft, dict):
                draft = RoleDraft.from_dict(draft)

            if await self.store.get_role_by_name(draft.name) is not None:
                raise ValidationError(f"Role already exists: {draft.name}")

            role = Role(
                id=uuid4().hex,
                name=draft.name,
                display_name=draft.display_name or draft.name,
                description=draft.description or "",
                color=draft.color or self.settings.default_role_color,
                icon=draft.icon or self.settings.default_role_icon,
                level=draft.level if draft.level is not None else self.settings.default_role_level,
                is_system=False,
                is_active=True,
            )
            created = await self.store.create_role(role, draft.permission_ids, granted_by=self._actor())
        except Exception as exc:
            e = as_access_error(exc)
            logger.error(f"Failed to create role: {e.message}")
            return OperationResult.fail(e)

        await self._audit(AuditAction.ROLE_CREATE, AuditEntity.ROLE, created.id, {
            "name": created.name,
            "displayName": created.display_name,
            "permissionCount": len(draft.permission_ids or []),
        })
        logger.info(f"Role created: {created.name}")
        return OperationResult.ok(role_id=created.id)

    async def update_role_permissions(self, role_id: str, permission_ids: List[str]) -> OperationResult:
        """
        Replace a role's whole permission set.

        Every principal holding the role may be affected, so the entire cache
        is invalidated.
        """
        try:
            permission_ids = ensure_id_list(permission_ids, "permission_ids")
            await self.store.replace_role_permissions(role_id, permission_ids, granted_by=self._actor())
        except Exception as exc:
            e = as_access_error(exc)
            logger.error(f"Failed to update permissions of role {role_id}: {e.message}")
            return OperationResult.fail(e)

        await self._audit(AuditAction.ROLE_PERMISSIONS_UPDATED, AuditEntity.ROLE, role_id, {
            "permissionCount": len(permission_ids),
        })
        self.cache.invalidate_all()
        logger.info(f"Role permissions updated: {role_id}")
        return OperationResult.ok(role_id=role_id, permission_count=len(permission_ids))

    async def assign_roles_to_user(self, user_id: str, role_ids: List[str]) -> OperationResult:
        """Replace a user's whole role set and drop that user's cache entry."""
        try:
            if user_id is None or not str(user_id).strip():
                raise ValidationError("No user supplied for role assignment")
            user_id = str(user_id)
            role_ids = ensure_id_list(role_ids, "role_ids")
            await self.store.replace_user_roles(user_id, role_ids, assigned_by=self._actor())
        except Exception as exc:
            e = as_access_error(exc)
            logger.error(f"Failed to assign roles to user {user_id}: {e.message}")
            return OperationResult.fail(e)

        await self._audit(AuditAction.USER_ROLES_ASSIGNED, AuditEntity.USER, user_id, {
            "roleCount": len(role_ids),
        })
        self.cache.invalidate(user_id)
        logger.info(f"User roles assigned: {user_id}")
        return OperationResult.ok(user_id=user_id, role_count=len(role_ids))

    async def delete_role(self, role_id: str) -> OperationResult:
        """
        Delete a custom role.

        System roles fail with ProtectedResourceError before any write.
        """
        try:
            role = await self.store.get_role(role_id)
            if role is None:
                raise RoleNotFoundError(role_id)
            if not role.is_deletable():
                raise ProtectedResourceError(
                    f"Cannot delete system role: {role.name}",
                    details={"role_id": role.id},
                )
            if not await self.store.delete_role(role.id):
                raise RoleNotFoundError(role_id)
        except Exception as exc:
            e = as_access_error(exc)
            logger.error(f"Failed to delete role {role_id}: {e.message}")
            return OperationResult.fail(e)

        await self._audit(AuditAction.ROLE_DELETE, AuditEntity.ROLE, role.id, {
            "name": role.name,
            "deletedBy": self._actor(),
        })
        self.cache.invalidate_all()
        logger.info(f"Role deleted: {role.name}")
        return OperationResult.ok(role_id=role.id)

    # Read projections

    async def get_role(self, role_ref: str) -> Optional[Role]:
        """Role by id or name with its permissions, or None."""
        try:
            return await self.store.get_role(role_ref)
        except Exception as e:
            logger.error(f"Failed to get role {role_ref}: {e}")
            return None

    async def get_roles(self) -> List[Role]:
        try:
            return await self.store.list_roles()
        except Exception as e:
            logger.error(f"Failed to get roles: {e}")
            return []

    async def get_user_roles(self, user_id: Optional[str] = None) -> List[Role]:
        principal = resolve_principal(user_id, self.principal_provider)
        try:
            return await self.store.get_user_roles(principal)
        except Exception as e:
            logger.error(f"Failed to get user roles: {e}")
            return []

    async def get_all_permissions(self) -> List[Permission]:
        try:
            return await self.store.list_permissions()
        except Exception as e:
            logger.error(f"Failed to get all permissions: {e}")
            return []
