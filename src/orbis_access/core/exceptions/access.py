"""Access-control exceptions for orbis-access."""

from typing import Any, Dict, Optional

from .base import OrbisAccessError


class ConfigurationError(OrbisAccessError):
    """Raised when settings are missing or invalid."""
    pass


class ValidationError(OrbisAccessError):
    """Raised for a missing principal or a malformed input value."""
    pass


class NotFoundError(OrbisAccessError):
    """Raised when a referenced role or permission does not exist."""

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            f"{entity_type.capitalize()} not found: {entity_id}",
            details={"entity_type": entity_type, "entity_id": str(entity_id), **(details or {})}
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class RoleNotFoundError(NotFoundError):
    """Raised when a role id or name does not resolve."""

    def __init__(self, role_id: Any):
        super().__init__("role", role_id)


class PermissionNotFoundError(NotFoundError):
    """Raised when a permission id does not resolve."""

    def __init__(self, permission_id: Any):
        super().__init__("permission", permission_id)


class ProtectedResourceError(OrbisAccessError):
    """Raised when a system role is targeted for deletion."""
    pass


class StoreError(OrbisAccessError):
    """Raised when the underlying persistence layer fails."""
    pass


class TransactionError(StoreError):
    """Raised when a multi-statement write could not be committed."""
    pass
