"""In-process permission store.

Implements the PermissionStore and AuditStore protocols with the same
semantics as the relational store: cascading role deletes, the system-role
guard and atomic replace-all writes. Used for tests and embedded setups.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ....core.exceptions import (
    PermissionNotFoundError,
    RoleNotFoundError,
    ValidationError,
)
from ..entities import (
    Permission,
    PermissionAuditEntry,
    Role,
    RolePermission,
    UserRole,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryPermissionStore:
    """Dictionary-backed implementation of the permission store protocols."""

    def __init__(self):
        self.permissions: Dict[str, Permission] = {}
        self.roles: Dict[str, Role] = {}
        self.role_permissions: List[RolePermission] = []
        self.user_roles: List[UserRole] = []
        self.audit_log: List[PermissionAuditEntry] = []
        self._write_lock = asyncio.Lock()

    # Seeding

    def seed_permission(
        self,
        permission_id: str,
        permission: str,
        description: str = "",
        category: Optional[str] = None,
        is_active: bool = True
    ) -> Permission:
        """Insert a permission row; the code is split into resource and action."""
        if any(p.permission == permission for p in self.permissions.values()):
            raise ValidationError(f"Permission already exists: {permission}")
        resource, _, action = permission.partition(":")
        row = Permission(
            id=permission_id,
            resource=resource,
            action=action,
            permission=permission,
            description=description,
            category=category or resource,
            is_active=is_active,
        )
        self.permissions[permission_id] = row
        return row

    def seed_role(
        self,
        role_id: str,
        name: str,
        level: int = 50,
        is_system: bool = False,
        is_active: bool = True,
        permission_ids: Optional[List[str]] = None
    ) -> Role:
        """Insert a role row (system roles come from here, never from create_role)."""
        self._ensure_unique_name(name)
        role = Role(
            id=role_id,
            name=name,
            display_name=name,
            level=level,
            is_system=is_system,
            is_active=is_active,
            created_at=_utcnow(),
        )
        self.roles[role_id] = role
        for permission_id in permission_ids or []:
            self._require_permission(permission_id)
            self.role_permissions.append(RolePermission(role_id, permission_id, None, _utcnow()))
        return role

    def seed_user_roles(self, user_id: str, role_ids: List[str]) -> None:
        for role_id in role_ids:
            self._require_role(role_id)
            self.user_roles.append(UserRole(user_id, role_id, None, _utcnow()))

    # Reads

    async def load_user_permission_codes(self, user_id: str) -> List[str]:
        role_ids = {
            ur.role_id for ur in self.user_roles
            if ur.user_id == user_id and self.roles[ur.role_id].is_active
        }
        codes = set()
        for rp in self.role_permissions:
            if rp.role_id in role_ids:
                permission = self.permissions[rp.permission_id]
                if permission.is_active:
                    codes.add(permission.permission)
        return sorted(codes)

    async def list_permissions(self) -> List[Permission]:
        active = [p for p in self.permissions.values() if p.is_active]
        return sorted(active, key=lambda p: (p.category or "", p.resource, p.action))

    async def list_roles(self) -> List[Role]:
        active = [r for r in self.roles.values() if r.is_active]
        return sorted(active, key=lambda r: -r.level)

    async def get_role(self, role_ref: str) -> Optional[Role]:
        role = self.roles.get(role_ref)
        if role is None:
            role = next((r for r in self.roles.values() if r.name == role_ref), None)
        if role is None:
            return None

        permissions = [
            self.permissions[rp.permission_id]
            for rp in self.role_permissions
            if rp.role_id == role.id and self.permissions[rp.permission_id].is_active
        ]
        permissions.sort(key=lambda p: (p.category or "", p.resource, p.action))
        return replace(role, permissions=permissions)

    async def get_role_by_name(self, name: str) -> Optional[Role]:
        return next((r for r in self.roles.values() if r.name == name), None)

    async def get_user_roles(self, user_id: str) -> List[Role]:
        roles = [
            self.roles[ur.role_id] for ur in self.user_roles
            if ur.user_id == user_id and self.roles[ur.role_id].is_active
        ]
        return sorted(roles, key=lambda r: -r.level)

    # Writes

    async def create_role(
        self,
        role: Role,
        permission_ids: Optional[List[str]] = None,
        granted_by: Optional[str] = None
    ) -> Role:
        async with self._write_lock:
            self._ensure_unique_name(role.name)
            if role.id in self.roles:
                raise ValidationError(f"Role already exists: {role.id}")
            for permission_id in permission_ids or []:
                self._require_permission(permission_id)

            created = replace(role, created_at=role.created_at or _utcnow(), permissions=[])
            self.roles[role.id] = created
            now = _utcnow()
            self.role_permissions.extend(
                RolePermission(role.id, permission_id, granted_by, now)
                for permission_id in permission_ids or []
            )
            return created

    async def replace_role_permissions(
        self,
        role_id: str,
        permission_ids: List[str],
        granted_by: Optional[str] = None
    ) -> None:
        async with self._write_lock:
            self._require_role(role_id)
            for permission_id in permission_ids:
                self._require_permission(permission_id)

            now = _utcnow()
            kept = [rp for rp in self.role_permissions if rp.role_id != role_id]
            kept.extend(RolePermission(role_id, pid, granted_by, now) for pid in permission_ids)
            # Single rebinding so readers never see the role without permissions.
            self.role_permissions = kept

    async def replace_user_roles(
        self,
        user_id: str,
        role_ids: List[str],
        assigned_by: Optional[str] = None
    ) -> None:
        async with self._write_lock:
            for role_id in role_ids:
                self._require_role(role_id)

            now = _utcnow()
            kept = [ur for ur in self.user_roles if ur.user_id != user_id]
            kept.extend(UserRole(user_id, rid, assigned_by, now) for rid in role_ids)
            self.user_roles = kept

    async def delete_role(self, role_id: str) -> bool:
        async with self._write_lock:
            role = self.roles.get(role_id)
            if role is None or role.is_system:
                return False

            del self.roles[role_id]
            self.role_permissions = [rp for rp in self.role_permissions if rp.role_id != role_id]
            self.user_roles = [ur for ur in self.user_roles if ur.role_id != role_id]
            logger.debug(f"Deleted role {role_id} with its associations")
            return True

    # Audit

    async def append_audit_entry(self, entry: PermissionAuditEntry) -> None:
        self.audit_log.append(entry)

    async def list_audit_entries(self, limit: int = 100) -> List[PermissionAuditEntry]:
        return list(reversed(self.audit_log))[:limit]

    # Helpers

    def _ensure_unique_name(self, name: str) -> None:
        if any(r.name == name for r in self.roles.values()):
            raise ValidationError(f"Role already exists: {name}")

    def _require_role(self, role_id: str) -> None:
        if role_id not in self.roles:
            raise RoleNotFoundError(role_id)

    def _require_permission(self, permission_id: str) -> None:
        if permission_id not in self.permissions:
            raise PermissionNotFoundError(permission_id)
