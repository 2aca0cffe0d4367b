"""Best-effort audit trail for permission mutations.

Writes never raise. The outcome comes back as an AuditResult for the caller
to log.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional
from uuid import uuid4

from ....config import AccessSettings, get_settings
from ..entities import AuditResult, AuditStore, PermissionAuditEntry, PrincipalProvider

logger = logging.getLogger(__name__)


class AuditLogger:
    """Serializes and appends permission audit entries."""

    def __init__(
        self,
        store: AuditStore,
        principal_provider: Optional[PrincipalProvider] = None,
        origin: Optional[Callable[[], Optional[str]]] = None,
        settings: Optional[AccessSettings] = None,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    ):
        """
        Args:
            store: Append-only audit sink
            principal_provider: Supplies the acting principal when not passed
            origin: Returns the request origin address
            settings: Optional settings override
            now: Timestamp source
        """
        self.store = store
        self.principal_provider = principal_provider
        self.origin = origin
        self.settings = settings or get_settings()
        self._now = now

    def _ip_address(self) -> str:
        if self.origin is not None:
            try:
                address = self.origin()
            except Exception as e:
                logger.debug(f"Could not resolve request origin: {e}")
                address = None
            if address:
                return address
        return self.settings.audit_default_ip

    def _actor(self, performed_by: Optional[str]) -> Optional[str]:
        if performed_by is not None:
            return performed_by
        if self.principal_provider is not None:
            return self.principal_provider.current_user_id()
        return None

    async def log_permission_audit(
        self,
        action: str,
        entity_type: str,
        entity_id: str,
        target_id: Optional[str] = None,
        details: Optional[Any] = None,
        performed_by: Optional[str] = None
    ) -> AuditResult:
        """
        Append one audit entry.

        Args:
            action: Audit action (e.g. "role_create")
            entity_type: Entity kind (e.g. "role")
            entity_id: Identifier of the entity acted upon
            target_id: Optional secondary entity
            details: JSON-serializable payload
            performed_by: Acting principal, defaults to the session principal

        Returns:
            AuditResult describing whether the entry was recorded
        """
        try:
            entry = PermissionAuditEntry(
                id=uuid4().hex,
                action=str(getattr(action, "value", action)),
                entity_type=str(getattr(entity_type, "value", entity_type)),
                entity_id=str(entity_id),
                target_id=str(target_id) if target_id is not None else None,
                performed_by=self._actor(performed_by),
                details=json.dumps(details, default=str) if details is not None else None,
                ip_address=self._ip_address(),
                created_at=self._now(),
            )
            await self.store.append_audit_entry(entry)
        except Exception as e:
            return AuditResult.failed(str(e))

        return AuditResult.ok(entry.id)

    async def recent_entries(self, limit: Optional[int] = None) -> List[PermissionAuditEntry]:
        """Most recent audit entries, newest first."""
        limit = limit or self.settings.audit_recent_limit
        return await self.store.list_audit_entries(limit)
