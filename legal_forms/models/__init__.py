"""Data models"""

from legal_forms.models.template import (
    TemplateCategory,
    FieldType,
    FieldValidation,
    TextField,
    TextareaField,
    SelectField,
    DateField,
    NumberField,
    CurrencyField,
    CheckboxField,
    SignatureField,
    TemplateField,
    TemplateSection,
    DocumentTemplate,
)
from legal_forms.models.document import (
    DocumentStatus,
    GeneratedDocument,
    document_file_name,
)
from legal_forms.models.form import (
    SessionState,
    ValidationResult,
    SaveResult,
)

__all__ = [
    "TemplateCategory",
    "FieldType",
    "FieldValidation",
    "TextField",
    "TextareaField",
    "SelectField",
    "DateField",
    "NumberField",
    "CurrencyField",
    "CheckboxField",
    "SignatureField",
    "TemplateField",
    "TemplateSection",
    "DocumentTemplate",
    "DocumentStatus",
    "GeneratedDocument",
    "document_file_name",
    "SessionState",
    "ValidationResult",
    "SaveResult",
]
