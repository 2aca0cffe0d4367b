"""AsyncPG-based permission store.

Concrete implementation of the PermissionStore and AuditStore protocols.
Every driver failure is wrapped into StoreError at this boundary; replace-all
writes run inside one transaction.
"""

import logging
from typing import List, Optional

import asyncpg

from ....core.exceptions import (
    OrbisAccessError,
    PermissionNotFoundError,
    RoleNotFoundError,
    StoreError,
    TransactionError,
    ValidationError,
)
from ....database import DatabaseManager
from ..entities import Permission, PermissionAuditEntry, Role
from .schema import SCHEMA_SQL

logger = logging.getLogger(__name__)

PERMISSION_COLUMNS = "p.id, p.resource, p.action, p.permission, p.description, p.category, p.is_active"
ROLE_COLUMNS = (
    "r.id, r.name, r.display_name, r.description, r.color, r.icon, "
    "r.level, r.is_system, r.is_active, r.created_at"
)


class AsyncPGPermissionStore:
    """AsyncPG implementation of the permission store protocols."""

    def __init__(self, database: DatabaseManager):
        """Initialize with a database manager owning the pool."""
        self.database = database

    async def install_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        try:
            await self.database.execute(SCHEMA_SQL)
        except Exception as e:
            logger.error(f"Failed to install permission schema: {e}")
            raise StoreError(f"Failed to install permission schema: {e}") from e

    def _build_permission_from_row(self, row: asyncpg.Record) -> Permission:
        return Permission(
            id=row['id'],
            resource=row['resource'],
            action=row['action'],
            permission=row['permission'],
            description=row['description'] or "",
            category=row['category'],
            is_active=row['is_active'],
        )

    def _build_role_from_row(self, row: asyncpg.Record, permissions: Optional[List[Permission]] = None) -> Role:
        return Role(
            id=row['id'],
            name=row['name'],
            display_name=row['display_name'],
            description=row['description'] or "",
            color=row['color'],
            icon=row['icon'],
            level=row['level'],
            is_system=row['is_system'],
            is_active=row['is_active'],
            created_at=row['created_at'],
            permissions=permissions or [],
        )

    # Reads

    async def load_user_permission_codes(self, user_id: str) -> List[str]:
        query = """
            SELECT DISTINCT p.permission
            FROM user_roles ur
            INNER JOIN roles r ON ur.role_id = r.id
            INNER JOIN role_permissions rp ON rp.role_id = r.id
            INNER JOIN permissions p ON rp.permission_id = p.id
            WHERE ur.user_id = $1 AND r.is_active AND p.is_active
            ORDER BY p.permission
        """
        try:
            rows = await self.database.fetch(query, user_id)
            return [row['permission'] for row in rows]
        except Exception as e:
            logger.error(f"Failed to load permissions for user {user_id}: {e}")
            raise StoreError(f"Failed to load user permissions: {e}") from e

    async def list_permissions(self) -> List[Permission]:
        query = f"""
            SELECT {PERMISSION_COLUMNS}
            FROM permissions p
            WHERE p.is_active
            ORDER BY p.category, p.resource, p.action
        """
        try:
            rows = await self.database.fetch(query)
            return [self._build_permission_from_row(row) for row in rows]
        except Exception as e:
            logger.error(f"Failed to list permissions: {e}")
            raise StoreError(f"Failed to list permissions: {e}") from e

    async def list_roles(self) -> List[Role]:
        query = f"""
            SELECT {ROLE_COLUMNS}
            FROM roles r
            WHERE r.is_active
            ORDER BY r.level DESC
        """
        try:
            rows = await self.database.fetch(query)
            return [self._build_role_from_row(row) for row in rows]
        except Exception as e:
            logger.error(f"Failed to list roles: {e}")
            raise StoreError(f"Failed to list roles: {e}") from e

    async def get_role(self, role_ref: str) -> Optional[Role]:
        role_query = f"""
            SELECT {ROLE_COLUMNS}
            FROM roles r
            WHERE r.id = $1 OR r.name = $1
            ORDER BY (r.id = $1) DESC
            LIMIT 1
        """
        permission_query = f"""
            SELECT {PERMISSION_COLUMNS}
            FROM role_permissions rp
            INNER JOIN permissions p ON rp.permission_id = p.id
            WHERE rp.role_id = $1 AND p.is_active
            ORDER BY p.category, p.resource, p.action
        """
        try:
            async with self.database.acquire() as conn:
                row = await conn.fetchrow(role_query, role_ref)
                if row is None:
                    return None
                permission_rows = await conn.fetch(permission_query, row['id'])
            permissions = [self._build_permission_from_row(p) for p in permission_rows]
            return self._build_role_from_row(row, permissions)
        except Exception as e:
            logger.error(f"Failed to get role {role_ref}: {e}")
            raise StoreError(f"Failed to retrieve role: {e}") from e

    async def get_role_by_name(self, name: str) -> Optional[Role]:
        query = f"""
            SELECT {ROLE_COLUMNS}
            FROM roles r
            WHERE r.name = $1
        """
        try:
            row = await self.database.fetchrow(query, name)
            return self._build_role_from_row(row) if row is not None else None
        except Exception as e:
            logger.error(f"Failed to get role named {name}: {e}")
            raise StoreError(f"Failed to retrieve role: {e}") from e

    async def get_user_roles(self, user_id: str) -> List[Role]:
        query = f"""
            SELECT {ROLE_COLUMNS}
            FROM user_roles ur
            INNER JOIN roles r ON ur.role_id = r.id
            WHERE ur.user_id = $1 AND r.is_active
            ORDER BY r.level DESC
        """
        try:
            rows = await self.database.fetch(query, user_id)
            return [self._build_role_from_row(row) for row in rows]
        except Exception as e:
            logger.error(f"Failed to get roles for user {user_id}: {e}")
            raise StoreError(f"Failed to retrieve user roles: {e}") from e

    # Writes

    async def create_role(
        self,
        role: Role,
        permission_ids: Optional[List[str]] = None,
        granted_by: Optional[str] = None
    ) -> Role:
        query = f"""
            INSERT INTO roles AS r (id, name, display_name, description, color, icon, level, is_system, is_active)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            RETURNING {ROLE_COLUMNS}
        """
        try:
            async with self.database.transaction() as conn:
                row = await conn.fetchrow(
                    query,
                    role.id, role.name, role.display_name, role.description,
                    role.color, role.icon, role.level, role.is_system, role.is_active
                )
                if permission_ids:
                    await self._insert_role_permissions(conn, role.id, permission_ids, granted_by)
            return self._build_role_from_row(row)
        except asyncpg.UniqueViolationError as e:
            raise ValidationError(f"Role already exists: {role.name}") from e
        except OrbisAccessError:
            raise
        except Exception as e:
            logger.error(f"Failed to create role {role.name}: {e}")
            raise TransactionError(f"Failed to create role: {e}") from e

    async def replace_role_permissions(
        self,
        role_id: str,
        permission_ids: List[str],
        granted_by: Optional[str] = None
    ) -> None:
        try:
            async with self.database.transaction() as conn:
                locked = await conn.fetchval("SELECT id FROM roles WHERE id = $1 FOR UPDATE", role_id)
                if locked is None:
                    raise RoleNotFoundError(role_id)
                await conn.execute("DELETE FROM role_permissions WHERE role_id = $1", role_id)
                await self._insert_role_permissions(conn, role_id, permission_ids, granted_by)
        except OrbisAccessError:
            raise
        except Exception as e:
            logger.error(f"Failed to replace permissions of role {role_id}: {e}")
            raise TransactionError(f"Failed to update role permissions: {e}") from e

    async def replace_user_roles(
        self,
        user_id: str,
        role_ids: List[str],
        assigned_by: Optional[str] = None
    ) -> None:
        try:
            async with self.database.transaction() as conn:
                # Serializes concurrent replaces for the same user
                await conn.execute("SELECT pg_advisory_xact_lock(hashtext($1))", user_id)
                if role_ids:
                    found = await conn.fetch("SELECT id FROM roles WHERE id = ANY($1::text[])", role_ids)
                    missing = set(role_ids) - {row['id'] for row in found}
                    if missing:
                        raise RoleNotFoundError(sorted(missing)[0])
                await conn.execute("DELETE FROM user_roles WHERE user_id = $1", user_id)
                if role_ids:
                    await conn.executemany(
                        "INSERT INTO user_roles (user_id, role_id, assigned_by) VALUES ($1, $2, $3)",
                        [(user_id, role_id, assigned_by) for role_id in role_ids]
                    )
        except OrbisAccessError:
            raise
        except Exception as e:
            logger.error(f"Failed to replace roles of user {user_id}: {e}")
            raise TransactionError(f"Failed to assign roles: {e}") from e

    async def delete_role(self, role_id: str) -> bool:
        # role_permissions and user_roles rows go with it via ON DELETE CASCADE
        try:
            status = await self.database.execute(
                "DELETE FROM roles WHERE id = $1 AND NOT is_system", role_id
            )
            return status.endswith(" 1")
        except Exception as e:
            logger.error(f"Failed to delete role {role_id}: {e}")
            raise StoreError(f"Failed to delete role: {e}") from e

    async def _insert_role_permissions(
        self,
        conn: asyncpg.Connection,
        role_id: str,
        permission_ids: List[str],
        granted_by: Optional[str]
    ) -> None:
        if not permission_ids:
            return
        found = await conn.fetch("SELECT id FROM permissions WHERE id = ANY($1::text[])", permission_ids)
        missing = set(permission_ids) - {row['id'] for row in found}
        if missing:
            raise PermissionNotFoundError(sorted(missing)[0])
        await conn.executemany(
            "INSERT INTO role_permissions (role_id, permission_id, granted_by) VALUES ($1, $2, $3)",
            [(role_id, permission_id, granted_by) for permission_id in permission_ids]
        )

    # Audit

    async def append_audit_entry(self, entry: PermissionAuditEntry) -> None:
        query = """
            INSERT INTO permission_audit_log
                (id, action, entity_type, entity_id, target_id, performed_by, details, ip_address, created_at)
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
        """
        try:
            await self.database.execute(
                query,
                entry.id, entry.action, entry.entity_type, entry.entity_id, entry.target_id,
                entry.performed_by, entry.details, entry.ip_address, entry.created_at
            )
        except Exception as e:
            raise StoreError(f"Failed to write audit entry: {e}") from e

    async def list_audit_entries(self, limit: int = 100) -> List[PermissionAuditEntry]:
        query = """
            SELECT id, action, entity_type, entity_id, target_id, performed_by, details, ip_address, created_at
            FROM permission_audit_log
            ORDER BY created_at DESC
            LIMIT $1
        """
        try:
            rows = await self.database.fetch(query, limit)
            return [PermissionAuditEntry(**dict(row)) for row in rows]
        except Exception as e:
            logger.error(f"Failed to list audit entries: {e}")
            raise StoreError(f"Failed to list audit entries: {e}") from e
