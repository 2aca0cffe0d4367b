"""
Permission Resolver for orbis-access

Answers exact and wildcard permission checks against a principal's effective
permission set, with any/all composition. Fails closed: a store error or an
unknown principal never grants access.
"""
import logging
from typing import Optional, Sequence

from ....core.exceptions import ValidationError
from ..entities import GLOBAL_WILDCARD, GrantSet, PermissionCode, PermissionStore, PrincipalProvider
from .permission_cache import PermissionCache

logger = logging.getLogger(__name__)

ADMIN_PERMISSIONS = (GLOBAL_WILDCARD, "admin:*")


def resolve_principal(user_id: Optional[str], principal_provider: Optional[PrincipalProvider]) -> str:
    """Explicit principal, else the provider's current one, else ValidationError."""
    if user_id is None and principal_provider is not None:
        user_id = principal_provider.current_user_id()

    if user_id is None or (isinstance(user_id, str) and not user_id.strip()):
        raise ValidationError("No principal supplied for permission check")
    return str(user_id)


class PermissionResolver:
    """Cache-backed permission checks for a principal."""

    def __init__(
        self,
        store: PermissionStore,
        cache: PermissionCache,
        principal_provider: Optional[PrincipalProvider] = None
    ):
        self.store = store
        self.cache = cache
        self.principal_provider = principal_provider

    async def _load(self, user_id: str) -> GrantSet:
        codes = await self.store.load_user_permission_codes(user_id)
        grants = GrantSet.from_codes(codes)
        logger.debug(f"Loaded {len(grants)} permissions for user {user_id}")
        return grants

    async def get_permission_set(self, user_id: Optional[str] = None) -> GrantSet:
        """
        Effective permission set for a principal.

        Raises:
            ValidationError: If no principal can be determined

        Returns:
            The cached or freshly loaded set; an empty set if loading failed
        """
        principal = resolve_principal(user_id, self.principal_provider)
        try:
            return await self.cache.get(principal, self._load)
        except Exception as e:
            logger.error(f"Failed to load permissions for user {principal}: {e}")
            return GrantSet.empty()

    async def has_permission(self, user_id: Optional[str], permission: str) -> bool:
        """
        Check if a principal holds a permission.

        Matches, in order: the exact string, ``*:*``, then ``<resource>:*``.

        Args:
            user_id: Principal identifier, or None for the session principal
            permission: Required permission (e.g. "tickets:create")

        Raises:
            ValidationError: Missing principal or malformed permission string
        """
        required = PermissionCode(permission)
        grants = await self.get_permission_set(user_id)

        if grants.allows(required):
            logger.debug(f"Permission granted: {permission}")
            return True

        logger.debug(f"Permission denied: {permission}")
        return False

    async def has_any_permission(self, user_id: Optional[str], permissions: Sequence[str]) -> bool:
        """True on the first permission held; False for an empty list."""
        if not permissions:
            return False

        for permission in permissions:
            if await self.has_permission(user_id, permission):
                return True
        return False

    async def has_all_permissions(self, user_id: Optional[str], permissions: Sequence[str]) -> bool:
        """
        True only if every permission is held. An empty list returns False.
        """
        if not permissions:
            return False

        for permission in permissions:
            if not await self.has_permission(user_id, permission):
                return False
        return True

    async def is_admin(self, user_id: Optional[str] = None) -> bool:
        return await self.has_any_permission(user_id, list(ADMIN_PERMISSIONS))

    async def is_super_admin(self, user_id: Optional[str] = None) -> bool:
        return await self.has_permission(user_id, GLOBAL_WILDCARD)

    async def has_role(self, user_id: Optional[str], role_name: str) -> bool:
        """Check role membership by name. Not cached; fails closed."""
        principal = resolve_principal(user_id, self.principal_provider)
        try:
            roles = await self.store.get_user_roles(principal)
        except Exception as e:
            logger.error(f"Failed to load roles for user {principal}: {e}")
            return False
        return any(role.name == role_name for role in roles)
