"""Document store backends"""

from typing import Optional

from legal_forms.db.base import DocumentStore
from legal_forms.db.memory import InMemoryDocumentStore
from legal_forms.db.sqlite import SQLiteDocumentStore
from legal_forms.utils.config import Settings, get_settings


def get_store(settings: Optional[Settings] = None) -> DocumentStore:
    """Create the document store selected by STORE_MODE"""
    settings = settings or get_settings()
    if settings.store_mode == "memory":
        return InMemoryDocumentStore()
    if settings.store_mode == "sqlite":
        return SQLiteDocumentStore(settings.database_path)
    raise ValueError(f"Unknown store mode: {settings.store_mode}")


__all__ = [
    "DocumentStore",
    "InMemoryDocumentStore",
    "SQLiteDocumentStore",
    "get_store",
]
