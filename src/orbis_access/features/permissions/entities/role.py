"""Role domain entities for the orbis-access permissions feature.

A role is a named, ordered bundle of permissions assignable to principals.
Maps to the ``roles`` table; associations live in ``role_permissions`` and
``user_roles``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ....core.exceptions import ValidationError
from .permission import Permission

MAX_ROLE_NAME_LENGTH = 100


@dataclass(frozen=True)
class Role:
    """Domain entity representing a role row, optionally with its permissions."""

    id: str
    name: str
    display_name: str
    description: str = ""
    color: Optional[str] = None
    icon: Optional[str] = None
    level: int = 0
    is_system: bool = False
    is_active: bool = True
    created_at: Optional[datetime] = None
    permissions: List[Permission] = field(default_factory=list, compare=False)

    def is_deletable(self) -> bool:
        """System roles are seeded and can never be removed."""
        return not self.is_system

    def permission_codes(self) -> List[str]:
        return [p.permission for p in self.permissions]

    def __str__(self) -> str:
        return f"Role({self.name})"

    def __repr__(self) -> str:
        flags = " [system]" if self.is_system else ""
        return f"Role({self.name}, level={self.level}, permissions={len(self.permissions)}{flags})"


@dataclass
class RoleDraft:
    """Input for creating a custom role.

    ``permission_ids`` of None means no initial permission write; an empty list
    is a supplied (empty) set.
    """

    name: str
    display_name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    level: Optional[int] = None
    permission_ids: Optional[List[str]] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValidationError("Role name cannot be empty")
        if len(self.name) > MAX_ROLE_NAME_LENGTH:
            raise ValidationError(
                f"Role name cannot exceed {MAX_ROLE_NAME_LENGTH} characters, got: {len(self.name)}"
            )
        if self.level is not None and not isinstance(self.level, int):
            raise ValidationError(f"Role level must be an integer, got: {self.level!r}")
        if self.permission_ids is not None:
            self.permission_ids = ensure_id_list(self.permission_ids, "permission_ids")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoleDraft":
        """Build a draft from a camelCase or snake_case payload."""
        return cls(
            name=data.get("name"),
            display_name=data.get("display_name", data.get("displayName")),
            description=data.get("description"),
            color=data.get("color"),
            icon=data.get("icon"),
            level=data.get("level"),
            permission_ids=data.get("permission_ids", data.get("permissions")),
        )


@dataclass(frozen=True)
class RolePermission:
    """Association row: role holds permission."""

    role_id: str
    permission_id: str
    granted_by: Optional[str] = None
    granted_at: Optional[datetime] = None


@dataclass(frozen=True)
class UserRole:
    """Association row: user is assigned role."""

    user_id: str
    role_id: str
    assigned_by: Optional[str] = None
    assigned_at: Optional[datetime] = None


def ensure_id_list(values: Any, field_name: str) -> List[str]:
    """Validate an id list and drop duplicates, keeping first-seen order."""
    if isinstance(values, (str, bytes)) or not isinstance(values, (list, tuple, set, frozenset)):
        raise ValidationError(f"{field_name} must be a list of ids, got: {type(values).__name__}")

    seen = []
    for value in values:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"{field_name} contains an empty id")
        value = str(value)
        if value not in seen:
            seen.append(value)
    return seen
