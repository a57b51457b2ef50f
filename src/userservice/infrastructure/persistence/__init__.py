"""User store adapters."""

from .memory_user_repository import InMemoryUserRepository
from .sqlite_user_repository import SQLiteUserRepository

__all__ = ["InMemoryUserRepository", "SQLiteUserRepository"]
