"""Structured results for mutating permission operations."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ....core.exceptions import OrbisAccessError


@dataclass(frozen=True)
class OperationResult:
    """Success/failure of a write so callers can surface a specific message."""

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    error_code: Optional[str] = None
    exception: Optional[OrbisAccessError] = field(default=None, compare=False, repr=False)

    @classmethod
    def ok(cls, **data: Any) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exception: OrbisAccessError) -> "OperationResult":
        return cls(
            success=False,
            error=exception.message,
            error_code=exception.error_code,
            exception=exception,
        )

    def __bool__(self) -> bool:
        return self.success
