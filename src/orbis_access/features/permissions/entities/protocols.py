"""Protocol interfaces for the permissions feature.

Contracts for the relational store, the audit sink and the identity
collaborator, following protocol-based dependency injection.
"""

from abc import abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

from .audit import PermissionAuditEntry
from .permission import Permission
from .role import Role


@runtime_checkable
class PermissionStore(Protocol):
    """Relational persistence for permissions, roles and their associations."""

    @abstractmethod
    async def load_user_permission_codes(self, user_id: str) -> List[str]:
        """Walk user_roles -> role_permissions -> permissions for active rows."""
        ...

    @abstractmethod
    async def list_permissions(self) -> List[Permission]:
        """Active permissions ordered by category, resource, action."""
        ...

    @abstractmethod
    async def list_roles(self) -> List[Role]:
        """Active roles ordered by level, highest first."""
        ...

    @abstractmethod
    async def get_role(self, role_ref: str) -> Optional[Role]:
        """Role by id or by name, with its active permissions loaded."""
        ...

    @abstractmethod
    async def get_role_by_name(self, name: str) -> Optional[Role]:
        """Role by exact name, without permissions."""
        ...

    @abstractmethod
    async def get_user_roles(self, user_id: str) -> List[Role]:
        """Active roles assigned to a user ordered by level, highest first."""
        ...

    @abstractmethod
    async def create_role(
        self,
        role: Role,
        permission_ids: Optional[List[str]] = None,
        granted_by: Optional[str] = None
    ) -> Role:
        """Insert a role and, if given, its permission set in one transaction."""
        ...

    @abstractmethod
    async def replace_role_permissions(
        self,
        role_id: str,
        permission_ids: List[str],
        granted_by: Optional[str] = None
    ) -> None:
        """Atomically discard and replace every role_permissions row of a role."""
        ...

    @abstractmethod
    async def replace_user_roles(
        self,
        user_id: str,
        role_ids: List[str],
        assigned_by: Optional[str] = None
    ) -> None:
        """Atomically discard and replace every user_roles row of a user."""
        ...

    @abstractmethod
    async def delete_role(self, role_id: str) -> bool:
        """Delete a non-system role and its associations. False if nothing was deleted."""
        ...


@runtime_checkable
class AuditStore(Protocol):
    """Append-only sink for permission audit entries."""

    @abstractmethod
    async def append_audit_entry(self, entry: PermissionAuditEntry) -> None:
        ...

    @abstractmethod
    async def list_audit_entries(self, limit: int = 100) -> List[PermissionAuditEntry]:
        """Most recent entries first."""
        ...


@runtime_checkable
class PrincipalProvider(Protocol):
    """Identity/session collaborator supplying the acting principal."""

    def current_user_id(self) -> Optional[str]:
        ...


class SessionPrincipal:
    """Holds the principal bound to the current session."""

    def __init__(self, user_id: Optional[str] = None):
        self._user_id = user_id

    def current_user_id(self) -> Optional[str]:
        return self._user_id

    def bind(self, user_id: str) -> None:
        self._user_id = user_id

    def clear(self) -> None:
        self._user_id = None
