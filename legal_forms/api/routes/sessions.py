"""Edit session routes: fill fields, save, generate"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from legal_forms.api.schemas import (
    FieldUpdateRequest,
    FieldUpdateResponse,
    GenerateRequest,
    SaveRequest,
    SaveResponse,
    SessionCreateRequest,
    SessionInfo,
)
from legal_forms.api.session_store import SessionEntry, SessionStore
from legal_forms.errors import (
    DocumentLockedError,
    DocumentNotFoundError,
    IncompleteDocumentError,
    TemplateNotFoundError,
    UnknownFieldError,
    UnsupportedTemplateError,
)
from legal_forms.services.documents import DocumentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])

# Shared service and session store, set via init_router() from app.py
service: Optional[DocumentService] = None
store: SessionStore = SessionStore()
output_dir: Optional[str] = None


def init_router(shared_service: DocumentService, shared_store: SessionStore,
                pdf_output_dir: Optional[str] = None):
    global service, store, output_dir
    service = shared_service
    store = shared_store
    output_dir = pdf_output_dir


def _session_info(entry: SessionEntry) -> SessionInfo:
    session = entry.session
    engine = session.engine
    return SessionInfo(
        session_id=entry.session_id,
        template_id=session.template.id,
        document_id=session.document_id,
        state=engine.state.value,
        data=engine.data,
        errors=engine.errors,
        completion=engine.completion(),
        missing_required=engine.missing_required(),
        can_generate=engine.can_generate,
    )


async def _get_entry(session_id: str) -> SessionEntry:
    entry = await store.get(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Session not found or expired: {session_id}")
    return entry


@router.post("", response_model=SessionInfo, status_code=201)
async def create_session(request: SessionCreateRequest):
    """Start a session for a new document (template_id) or a saved one (document_id)"""
    try:
        if request.document_id:
            session = service.open_document(request.document_id)
        elif request.template_id:
            session = service.create_session(request.template_id)
        else:
            raise HTTPException(status_code=422, detail="template_id or document_id is required")
        for name, value in request.data.items():
            session.set_field(name, value)
    except (TemplateNotFoundError, DocumentNotFoundError) as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UnknownFieldError as e:
        raise HTTPException(status_code=422, detail=str(e))

    entry = await store.add(session)
    logger.info(f"Session {entry.session_id} opened on {session.template.id}")
    return _session_info(entry)


@router.get("/{session_id}", response_model=SessionInfo)
async def get_session(session_id: str):
    return _session_info(await _get_entry(session_id))


@router.patch("/{session_id}/fields", response_model=FieldUpdateResponse)
async def update_fields(session_id: str, request: FieldUpdateRequest):
    """Set field values. Invalid values are stored and reported, not rejected."""
    entry = await _get_entry(session_id)
    results = {}
    try:
        for name, value in request.values.items():
            results[name] = entry.session.set_field(name, value).message
    except UnknownFieldError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return FieldUpdateResponse(results=results, session=_session_info(entry))


@router.post("/{session_id}/save", response_model=SaveResponse)
async def save_session(session_id: str, request: SaveRequest):
    """Save as draft, or as completed when every field validates"""
    entry = await _get_entry(session_id)
    try:
        if request.complete:
            result = service.save_complete(entry.session)
        else:
            result = service.save_draft(entry.session)
    except DocumentLockedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return SaveResponse(
        ok=result.ok,
        errors=result.errors,
        document=result.document,
        session=_session_info(entry),
    )


@router.post("/{session_id}/generate")
async def generate_pdf(session_id: str, request: Optional[GenerateRequest] = None):
    """Compose the session's document and return the PDF"""
    entry = await _get_entry(session_id)
    allow_incomplete = request.allow_incomplete if request else False
    target_dir = output_dir if entry.session.document is not None else None
    try:
        composed = service.generate(entry.session, output_dir=target_dir,
                                    allow_incomplete=allow_incomplete)
    except IncompleteDocumentError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except UnsupportedTemplateError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return Response(
        content=composed.buffer,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{composed.file_name}"',
            "X-Page-Count": str(composed.page_count),
        },
    )


@router.delete("/{session_id}")
async def close_session(session_id: str):
    if not await store.delete(session_id):
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return {"deleted": True}
