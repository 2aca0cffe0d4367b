"""Permission domain entity for the orbis-access permissions feature.

A permission is an atomic ``resource:action`` capability string. Maps to the
``permissions`` table.
"""

from dataclasses import dataclass
from typing import Optional

from ....core.exceptions import ValidationError

WILDCARD = "*"


@dataclass(frozen=True)
class PermissionCode:
    """Immutable value object for a ``resource:action`` string with validation."""

    value: str

    def __post_init__(self):
        """Validate permission code format: resource:action"""
        if not isinstance(self.value, str) or ":" not in self.value:
            raise ValidationError(f"Permission code must be in format 'resource:action', got: {self.value!r}")

        parts = self.value.split(":")
        if len(parts) != 2:
            raise ValidationError(f"Permission code must have exactly one colon, got: {self.value}")

        resource, action = parts
        if not resource.strip() or not action.strip():
            raise ValidationError(f"Both resource and action must be non-empty, got: {self.value}")

        for segment in parts:
            if WILDCARD in segment and segment != WILDCARD:
                raise ValidationError(f"Wildcard must replace a whole segment, got: {self.value}")

        if resource == WILDCARD and action != WILDCARD:
            raise ValidationError(f"Only '*:*' may wildcard the resource, got: {self.value}")

    @property
    def resource(self) -> str:
        """Extract resource part from permission code."""
        return self.value.split(":")[0]

    @property
    def action(self) -> str:
        """Extract action part from permission code."""
        return self.value.split(":")[1]

    @property
    def is_wildcard(self) -> bool:
        return self.action == WILDCARD

    @classmethod
    def of(cls, resource: str, action: str) -> "PermissionCode":
        return cls(f"{resource}:{action}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Permission:
    """Domain entity representing a seeded permission row."""

    id: str
    resource: str
    action: str
    permission: str
    description: str = ""
    category: Optional[str] = None
    is_active: bool = True

    @property
    def code(self) -> PermissionCode:
        return PermissionCode(self.permission)

    def __str__(self) -> str:
        return f"Permission({self.permission})"
