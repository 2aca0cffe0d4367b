"""HTTP status code mapping for orbis-access exceptions."""

from typing import Dict, Type

from .access import (
    ConfigurationError,
    NotFoundError,
    ProtectedResourceError,
    StoreError,
    ValidationError,
)

# Checked in order, so subclasses must precede their bases.
DEFAULT_STATUS_MAPPING: Dict[Type[Exception], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    ProtectedResourceError: 409,
    StoreError: 503,
    ConfigurationError: 500,
}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for an exception.

    Args:
        exception: The exception instance

    Returns:
        HTTP status code, 500 for anything unmapped
    """
    for exc_type, status_code in DEFAULT_STATUS_MAPPING.items():
        if isinstance(exception, exc_type):
            return status_code
    return 500
