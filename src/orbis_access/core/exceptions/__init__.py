"""Exception hierarchy for orbis-access."""

from .base import OrbisAccessError, create_error_response
from .access import (
    ConfigurationError,
    ValidationError,
    NotFoundError,
    RoleNotFoundError,
    PermissionNotFoundError,
    ProtectedResourceError,
    StoreError,
    TransactionError,
)
from .http_mapping import get_http_status_code

__all__ = [
    "OrbisAccessError",
    "create_error_response",
    "get_http_status_code",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "RoleNotFoundError",
    "PermissionNotFoundError",
    "ProtectedResourceError",
    "StoreError",
    "TransactionError",
]
