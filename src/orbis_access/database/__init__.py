"""Database access for orbis-access."""

from .connection import DatabaseManager

__all__ = ["DatabaseManager"]
