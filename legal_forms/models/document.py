"""Generated document models"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class DocumentStatus(str, Enum):
    """Lifecycle status of a generated document"""
    DRAFT = "draft"
    COMPLETED = "completed"
    SIGNED = "signed"           # set only by an external signing process


class GeneratedDocument(BaseModel):
    """A saved document: template reference plus a snapshot of its data"""
    id: str
    template_id: str
    template_name: str
    file_name: str
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    updated_at: Optional[datetime] = None
    pdf_url: Optional[str] = None
    status: DocumentStatus = DocumentStatus.DRAFT


def document_file_name(template_name: str, on_date: Optional[date] = None) -> str:
    """Derive a PDF file name, e.g. 'Counteroffer_to_Purchase_2024-06-01.pdf'"""
    on_date = on_date or date.today()
    safe_name = re.sub(r"[^a-zA-Z0-9]", "_", template_name)
    return f"{safe_name}_{on_date.isoformat()}.pdf"
