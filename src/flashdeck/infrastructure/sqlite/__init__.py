# Infrastructure SQLite Package
from .repository import SqliteFlashcardRepository
from .store import SqliteStore

__all__ = ["SqliteStore", "SqliteFlashcardRepository"]
