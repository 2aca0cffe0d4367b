"""
Database connection management using asyncpg for orbis-access.
"""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

import asyncpg
from asyncpg import Pool, Record

from ..config import AccessSettings, get_settings
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages the asyncpg connection pool backing the permission store."""

    def __init__(self, database_url: Optional[str] = None, settings: Optional[AccessSettings] = None, **pool_config):
        """Initialize DatabaseManager.

        Args:
            database_url: Database URL (defaults to ORBIS_ACCESS_DATABASE_URL)
            settings: Optional settings override
            **pool_config: Additional pool configuration options
        """
        settings = settings or get_settings()
        self.pool: Optional[Pool] = None
        self.dsn = database_url or settings.asyncpg_dsn or ""
        if "+asyncpg" in self.dsn:
            self.dsn = self.dsn.replace("+asyncpg", "")

        self.pool_config = {
            "min_size": settings.db_pool_min_size,
            "max_size": settings.db_pool_max_size,
            "command_timeout": settings.db_command_timeout,
            **pool_config
        }

    async def create_pool(self) -> Pool:
        """Create and return a connection pool."""
        if not self.dsn:
            raise ConfigurationError("No database URL configured for the permission store")

        if self.pool is None:
            logger.info(f"Creating database pool with size {self.pool_config['max_size']}")
            self.pool = await asyncpg.create_pool(
                self.dsn,
                server_settings={"application_name": "orbis-access"},
                **self.pool_config
            )
            logger.info("Database pool created successfully")
        return self.pool

    async def close_pool(self) -> None:
        """Close the connection pool."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Database pool closed")

    @asynccontextmanager
    async def acquire(self):
        """Acquire a connection from the pool."""
        if not self.pool:
            await self.create_pool()

        async with self.pool.acquire() as connection:
            yield connection

    @asynccontextmanager
    async def transaction(self):
        """Create a transaction context."""
        async with self.acquire() as connection:
            async with connection.transaction():
                yield connection

    async def execute(self, query: str, *args, timeout: float = None) -> str:
        """Execute a query without returning results."""
        async with self.acquire() as connection:
            return await connection.execute(query, *args, timeout=timeout)

    async def fetch(self, query: str, *args, timeout: float = None) -> List[Record]:
        """Fetch multiple rows."""
        async with self.acquire() as connection:
            return await connection.fetch(query, *args, timeout=timeout)

    async def fetchrow(self, query: str, *args, timeout: float = None) -> Optional[Record]:
        """Fetch a single row."""
        async with self.acquire() as connection:
            return await connection.fetchrow(query, *args, timeout=timeout)
