"""Permission repositories package.

Concrete store implementations for the permissions feature.
"""

from .asyncpg_store import AsyncPGPermissionStore
from .memory_store import MemoryPermissionStore
from .schema import SCHEMA_SQL

__all__ = [
    "AsyncPGPermissionStore",
    "MemoryPermissionStore",
    "SCHEMA_SQL",
]
