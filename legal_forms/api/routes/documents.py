"""Saved document routes"""

from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from legal_forms.api.schemas import DocumentListResponse
from legal_forms.errors import DocumentNotFoundError, TemplateNotFoundError, UnsupportedTemplateError
from legal_forms.models.document import GeneratedDocument
from legal_forms.services.documents import DocumentService

router = APIRouter(prefix="/api/documents", tags=["documents"])

# Shared service, set via init_router() from app.py
service: Optional[DocumentService] = None
output_dir: str = "./data/output"


def init_router(shared_service: DocumentService, pdf_output_dir: str):
    global service, output_dir
    service = shared_service
    output_dir = pdf_output_dir


@router.get("", response_model=DocumentListResponse)
async def list_documents(search: Optional[str] = None, status: Optional[str] = None,
                         category: Optional[str] = None):
    """Browse saved documents"""
    try:
        found = service.list_documents(search=search, status=status, category=category)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return DocumentListResponse(documents=found)


@router.get("/{document_id}", response_model=GeneratedDocument)
async def get_document(document_id: str):
    try:
        return service.get_document(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{document_id}/pdf")
async def download_pdf(document_id: str):
    """Re-create the PDF of a saved document from its stored data"""
    try:
        path = service.regenerate(document_id, output_dir)
    except (DocumentNotFoundError, TemplateNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UnsupportedTemplateError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return FileResponse(path, media_type="application/pdf", filename=path.name)


@router.delete("/{document_id}")
async def delete_document(document_id: str):
    try:
        service.delete_document(document_id)
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"deleted": True}
