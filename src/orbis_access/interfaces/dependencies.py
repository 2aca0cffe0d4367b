"""FastAPI dependencies for permission checks."""

import logging
from typing import Callable, List, Optional, Union

from fastapi import HTTPException, Request, status

from ..core.exceptions import ValidationError
from ..features.permissions.services import PermissionService

logger = logging.getLogger(__name__)

PRINCIPAL_HEADER = "X-User-Id"

PrincipalExtractor = Callable[[Request], Optional[str]]


def request_principal(request: Request) -> Optional[str]:
    """Principal placed on ``request.state.user_id`` by the identity layer."""
    return getattr(request.state, "user_id", None)


def header_principal(header: str = PRINCIPAL_HEADER) -> PrincipalExtractor:
    """
    Extractor trusting a request header as the principal id.

    Only for deployments where a gateway in front of the service authenticates
    the caller and sets the header itself.
    """
    def extract(request: Request) -> Optional[str]:
        return request.headers.get(header)

    return extract


class CheckPermission:
    """
    Permission checking dependency.

    Resolves the authenticated principal from the request and checks it
    against the permission engine. Returns the principal id on success.

    Usage:
        require_edit = CheckPermission(service, ["tickets:edit"])

        @app.put("/tickets/{ticket_id}")
        async def edit_ticket(ticket_id: str, user_id: str = Depends(require_edit)):
            ...
    """

    def __init__(
        self,
        service: PermissionService,
        permissions: Union[str, List[str]],
        any_of: bool = False,
        principal: PrincipalExtractor = request_principal
    ):
        """
        Initialize permission checker dependency.

        Args:
            service: Permission service performing the checks
            permissions: Required permission codes
            any_of: If True, requires ANY permission; if False, requires ALL
            principal: Extracts the authenticated principal id from the request
        """
        self.service = service
        self.permissions = permissions if isinstance(permissions, list) else [permissions]
        self.any_of = any_of
        self.principal = principal

    async def __call__(self, request: Request) -> str:
        """
        Raises:
            HTTPException: 401 without a principal, 403 when permissions are missing
        """
        user_id = self.principal(request)
        if not user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required",
            )

        try:
            if self.any_of:
                allowed = await self.service.has_any_permission(self.permissions, user_id)
            else:
                allowed = await self.service.has_all_permissions(self.permissions, user_id)
        except ValidationError as e:
            logger.warning(f"Rejected permission check for user {user_id}: {e.message}")
            allowed = False

        if not allowed:
            logger.warning(f"Permission denied for user {user_id}: {self.permissions}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {', '.join(self.permissions)}",
            )

        logger.debug(f"Permission check passed for user {user_id}")
        return user_id
