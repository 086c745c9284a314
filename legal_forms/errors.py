"""Exceptions raised by the document engine.

Field validation failures are not exceptions; they are returned as data
(``ValidationResult`` / ``SaveResult.errors``) so the session stays editable.
"""


class DocumentEngineError(Exception):
    """Base class for all engine errors"""


class TemplateNotFoundError(DocumentEngineError, LookupError):
    """No template is registered under the requested id"""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")


class UnsupportedTemplateError(DocumentEngineError, ValueError):
    """The template exists but no composition routine handles it"""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Unsupported template type: {template_id}")


class UnknownFieldError(DocumentEngineError, KeyError):
    """A field name the template does not declare"""

    def __init__(self, template_id: str, name: str):
        self.template_id = template_id
        self.name = name
        super().__init__(f"Template '{template_id}' has no field '{name}'")

    def __str__(self) -> str:
        return self.args[0]


class DocumentNotFoundError(DocumentEngineError, LookupError):
    """No stored document under the requested id"""

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")


class IncompleteDocumentError(DocumentEngineError):
    """Full generation was requested before all required fields were filled"""

    def __init__(self, completion: int):
        self.completion = completion
        super().__init__(f"Document is {completion}% complete; fill all required fields before generating")


class DocumentLockedError(DocumentEngineError):
    """Signed documents can no longer be saved"""

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document {document_id} is signed and cannot be modified")


class StoreError(DocumentEngineError):
    """Persistence failure in a document store"""
