"""Document service: edit sessions, saving, browsing and generation"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from legal_forms.db.base import DocumentStore
from legal_forms.errors import (
    DocumentLockedError,
    DocumentNotFoundError,
    IncompleteDocumentError,
)
from legal_forms.models.document import (
    DocumentStatus,
    GeneratedDocument,
    document_file_name,
)
from legal_forms.models.form import SaveResult, ValidationResult
from legal_forms.models.template import DocumentTemplate, TemplateCategory
from legal_forms.services.compositor import ComposedDocument, DocumentCompositor
from legal_forms.services.form_engine import FormEngine
from legal_forms.services.registry import TemplateRegistry

logger = logging.getLogger(__name__)


class EditSession:
    """One in-progress document: a form engine plus the stored record it edits"""

    def __init__(self, engine: FormEngine, document: Optional[GeneratedDocument] = None):
        self.engine = engine
        self.document = document

    @property
    def template(self) -> DocumentTemplate:
        return self.engine.template

    @property
    def document_id(self) -> Optional[str]:
        return self.document.id if self.document else None

    def set_field(self, name: str, value: Any) -> ValidationResult:
        return self.engine.set_field(name, value)

    def completion(self) -> int:
        return self.engine.completion()


class DocumentService:
    """Entry point for hosts (CLI, API): templates, sessions, documents"""

    def __init__(self, registry: TemplateRegistry, store: DocumentStore,
                 compositor: Optional[DocumentCompositor] = None):
        self.registry = registry
        self.store = store
        self.compositor = compositor or DocumentCompositor(registry)

    def list_templates(self) -> List[DocumentTemplate]:
        return self.registry.list_templates()

    def get_template(self, template_id: str) -> Optional[DocumentTemplate]:
        return self.registry.get_template(template_id)

    def create_session(self, template_id: str, initial_data: Optional[dict] = None) -> EditSession:
        """Start editing a new document from a template"""
        template = self.registry.require(template_id)
        return EditSession(FormEngine(template, initial_data))

    def open_document(self, document_id: str) -> EditSession:
        """Reload a saved document's record into a fresh form engine"""
        document = self.get_document(document_id)
        template = self.registry.require(document.template_id)
        return EditSession(FormEngine(template, document.data), document)

    def get_document(self, document_id: str) -> GeneratedDocument:
        document = self.store.load(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    def _persist(self, session: EditSession, data: dict, status: DocumentStatus) -> GeneratedDocument:
        """Write the full record; the session is only updated once the store succeeds"""
        now = datetime.now()
        if session.document is None:
            template = session.template
            document = GeneratedDocument(
                id=f"doc_{uuid.uuid4().hex[:12]}",
                template_id=template.id,
                template_name=template.name,
                file_name=document_file_name(template.name, now.date()),
                data=data,
                created_at=now,
                status=status,
            )
        else:
            if session.document.status == DocumentStatus.SIGNED:
                raise DocumentLockedError(session.document.id)
            document = session.document.model_copy(update={
                "data": data,
                "status": status,
                "updated_at": now,
            })

        self.store.save(document)
        session.document = document
        session.engine.mark_saved(complete=status == DocumentStatus.COMPLETED)
        logger.info(f"Saved {document.id} as {status.value} ({session.completion()}% complete)")
        return document

    def save_draft(self, session: EditSession) -> SaveResult:
        """Save at any completion level. Re-saving a completed document demotes it to draft."""
        data = session.engine.snapshot()
        document = self._persist(session, data, DocumentStatus.DRAFT)
        return SaveResult(ok=True, data=data, document=document)

    def save_complete(self, session: EditSession) -> SaveResult:
        """Save as completed if every field validates; otherwise return the field errors"""
        errors = session.engine.validate_all()
        if errors:
            logger.info(f"Complete save rejected: {len(errors)} invalid field(s)")
            return SaveResult(ok=False, errors=errors)
        data = session.engine.snapshot()
        document = self._persist(session, data, DocumentStatus.COMPLETED)
        return SaveResult(ok=True, data=data, document=document)

    def generate(self, session: EditSession, output_dir: Optional[str] = None,
                 allow_incomplete: bool = False) -> ComposedDocument:
        """Compose the session's document once all required fields are filled.

        With output_dir the PDF is written there, and a stored document
        records its pdf_url and the data it was generated from.
        """
        completion = session.completion()
        if completion < 100 and not allow_incomplete:
            raise IncompleteDocumentError(completion)

        data = session.engine.snapshot()
        file_name = session.document.file_name if session.document else None
        composed = self.compositor.compose(session.template.id, data, file_name=file_name)

        if output_dir:
            path = self.write_pdf(composed, output_dir)
            if session.document is not None and session.document.status != DocumentStatus.SIGNED:
                document = session.document.model_copy(update={
                    "pdf_url": str(path),
                    "data": data,
                    "updated_at": datetime.now(),
                })
                self.store.save(document)
                session.document = document
        return composed

    def generate_document(self, template_id: str, data: dict) -> ComposedDocument:
        """Compose directly from a data record, without a session"""
        return self.compositor.compose(template_id, data)

    def regenerate(self, document_id: str, output_dir: str) -> Path:
        """Re-create a stored document's PDF under its stored file name"""
        document = self.get_document(document_id)
        composed = self.compositor.compose(document.template_id, document.data,
                                           file_name=document.file_name)
        return self.write_pdf(composed, output_dir)

    @staticmethod
    def write_pdf(composed: ComposedDocument, output_dir: str) -> Path:
        path = Path(output_dir) / composed.file_name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(composed.buffer)
        logger.info(f"Wrote {path}")
        return path

    def list_documents(self, search: Optional[str] = None,
                       status: Optional[str | DocumentStatus] = None,
                       category: Optional[str | TemplateCategory] = None) -> List[GeneratedDocument]:
        """Browse stored documents filtered by search text, status and category"""
        documents = self.store.list()
        if search:
            needle = search.lower()
            documents = [
                d for d in documents
                if needle in d.template_name.lower() or needle in d.file_name.lower()
            ]
        if status and status != "all":
            status = DocumentStatus(status)
            documents = [d for d in documents if d.status == status]
        if category and category != "all":
            category = TemplateCategory(category)
            documents = [d for d in documents if self._category_of(d) == category]
        return documents

    def _category_of(self, document: GeneratedDocument) -> Optional[TemplateCategory]:
        template = self.registry.get_template(document.template_id)
        return template.category if template else None

    def delete_document(self, document_id: str) -> None:
        if not self.store.delete(document_id):
            raise DocumentNotFoundError(document_id)
