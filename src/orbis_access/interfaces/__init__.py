"""FastAPI integration for orbis-access."""

from .dependencies import CheckPermission, PRINCIPAL_HEADER, header_principal, request_principal
from .exception_handlers import register_exception_handlers

__all__ = [
    "CheckPermission",
    "PRINCIPAL_HEADER",
    "header_principal",
    "request_principal",
    "register_exception_handlers",
]
