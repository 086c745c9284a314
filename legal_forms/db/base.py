"""Abstract document store interface: strategy pattern for SQLite/in-memory switching"""

from abc import ABC, abstractmethod
from typing import List, Optional

from legal_forms.models.document import GeneratedDocument


class DocumentStore(ABC):
    """Persistence for generated documents.

    Every save receives the full record, never a diff. Concurrent saves of
    the same id follow last-writer-wins. Failures raise StoreError.
    """

    def init_db(self) -> None:
        """Initialize storage (create tables). No-op by default."""

    @abstractmethod
    def load(self, document_id: str) -> Optional[GeneratedDocument]:
        """Get document by ID, or None."""

    @abstractmethod
    def save(self, document: GeneratedDocument) -> None:
        """Insert or replace a document."""

    @abstractmethod
    def list(self) -> List[GeneratedDocument]:
        """All documents, oldest first."""

    @abstractmethod
    def delete(self, document_id: str) -> bool:
        """Delete a document. Returns True if it existed."""
