"""Request/response schemas for the document API"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from legal_forms.models.document import GeneratedDocument


class TemplateItem(BaseModel):
    """A template in the templates list"""
    id: str
    name: str
    description: str = ""
    category: str
    field_count: int = 0
    required_count: int = 0


class TemplatesResponse(BaseModel):
    """Response for listing templates"""
    templates: list[TemplateItem] = []


class SessionCreateRequest(BaseModel):
    """Start editing a new document, or reopen a saved one"""
    template_id: Optional[str] = None
    document_id: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict, description="Initial field values")


class SessionInfo(BaseModel):
    """Current state of an edit session"""
    session_id: str
    template_id: str
    document_id: Optional[str] = None
    state: str
    data: dict[str, Any] = {}
    errors: dict[str, str] = {}
    completion: int = 0
    missing_required: list[str] = []
    can_generate: bool = False


class FieldUpdateRequest(BaseModel):
    """Partial update of field values"""
    values: dict[str, Any] = Field(..., description="Field name to new value")


class FieldUpdateResponse(BaseModel):
    """Result of a field update: per-field validation plus the session state"""
    results: dict[str, Optional[str]] = {}
    session: SessionInfo


class SaveRequest(BaseModel):
    complete: bool = False


class SaveResponse(BaseModel):
    """Result of a save; errors are set and document is None when rejected"""
    ok: bool
    errors: dict[str, str] = {}
    document: Optional[GeneratedDocument] = None
    session: SessionInfo


class GenerateRequest(BaseModel):
    allow_incomplete: bool = False


class DocumentListResponse(BaseModel):
    documents: list[GeneratedDocument] = []


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    store_mode: str
    version: str = "0.1.0"
    active_sessions: int = 0
    timestamp: datetime = Field(default_factory=datetime.now)
