"""In-memory document store, for tests and throwaway sessions"""

from typing import Dict, List, Optional

from legal_forms.db.base import DocumentStore
from legal_forms.models.document import GeneratedDocument


class InMemoryDocumentStore(DocumentStore):
    """Keeps deep copies so callers cannot mutate stored records"""

    def __init__(self):
        self._documents: Dict[str, GeneratedDocument] = {}

    def load(self, document_id: str) -> Optional[GeneratedDocument]:
        document = self._documents.get(document_id)
        return document.model_copy(deep=True) if document else None

    def save(self, document: GeneratedDocument) -> None:
        self._documents[document.id] = document.model_copy(deep=True)

    def list(self) -> List[GeneratedDocument]:
        documents = sorted(self._documents.values(), key=lambda d: (d.created_at, d.id))
        return [d.model_copy(deep=True) for d in documents]

    def delete(self, document_id: str) -> bool:
        return self._documents.pop(document_id, None) is not None
