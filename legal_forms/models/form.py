"""Form session result models"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from legal_forms.models.document import GeneratedDocument


class SessionState(str, Enum):
    """Edit session states"""
    EMPTY = "empty"
    EDITING = "editing"
    DRAFT_SAVED = "draft_saved"
    COMPLETE_SAVED = "complete_saved"


class ValidationResult(BaseModel):
    """Outcome of validating one field value"""
    valid: bool
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, message: str) -> "ValidationResult":
        return cls(valid=False, message=message)


class SaveResult(BaseModel):
    """Outcome of a save: the record snapshot, or field errors"""
    ok: bool
    data: dict[str, Any] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
    document: Optional[GeneratedDocument] = None
