"""Storage layer: asyncpg pool wrapper and document/batch persistence."""

from insight_monitor.storage.database import Database, close_database, get_database
from insight_monitor.storage.repository import DocumentRepository

__all__ = ["Database", "close_database", "get_database", "DocumentRepository"]
