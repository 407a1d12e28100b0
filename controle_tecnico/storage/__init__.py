"""Storage backends for Controle Técnico."""
from typing import Optional

from .base import Storage
from .memory import MemoryStorage, default_users
from .postgres import PostgresStorage


def create_storage(database_url: Optional[str] = None) -> Storage:
    """Pick the backend: Postgres when a database URL is configured, memory otherwise."""
    if database_url:
        return PostgresStorage(dsn=database_url)
    return MemoryStorage()


__all__ = [
    "Storage",
    "MemoryStorage",
    "PostgresStorage",
    "create_storage",
    "default_users",
]
