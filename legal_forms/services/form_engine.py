"""Form engine: binds a template's fields to a live data record"""

import logging
import re
from typing import Any, Optional

from legal_forms.errors import UnknownFieldError
from legal_forms.models.form import SaveResult, SessionState, ValidationResult
from legal_forms.models.template import (
    NUMERIC_TYPES,
    STRING_TYPES,
    DocumentTemplate,
)

logger = logging.getLogger(__name__)

_UNSET = object()


def is_empty(value: Any) -> bool:
    """A value counts as not filled in when it is missing or an empty string"""
    return value is None or (isinstance(value, str) and value == "")


def validate_field(field, value: Any) -> ValidationResult:
    """Validate one value against a field's rules.

    Rules run in order and the first failure wins:
    required, type, pattern, length bounds (text types), numeric bounds.
    """
    if is_empty(value):
        if field.required:
            return ValidationResult.fail(f"{field.label} is required")
        return ValidationResult.ok()

    value, type_error = field.coerce(value)
    if type_error:
        return ValidationResult.fail(type_error)

    rules = field.validation
    if rules is None:
        return ValidationResult.ok()

    if rules.pattern and not re.search(rules.pattern, str(value)):
        return ValidationResult.fail(f"{field.label} format is invalid")

    if field.field_type in STRING_TYPES and isinstance(value, str):
        if rules.min_length is not None and len(value) < rules.min_length:
            return ValidationResult.fail(
                f"{field.label} must be at least {rules.min_length} characters")
        if rules.max_length is not None and len(value) > rules.max_length:
            return ValidationResult.fail(
                f"{field.label} must be no more than {rules.max_length} characters")

    if field.field_type in NUMERIC_TYPES:
        if rules.min is not None and value < rules.min:
            return ValidationResult.fail(f"{field.label} must be at least {_bound(rules.min)}")
        if rules.max is not None and value > rules.max:
            return ValidationResult.fail(f"{field.label} must be no more than {_bound(rules.max)}")

    return ValidationResult.ok()


def _bound(number: float) -> str:
    return str(int(number)) if float(number).is_integer() else str(number)


def _percent(done: int, total: int) -> int:
    """Round half up, like the progress bar in the form UI"""
    if total == 0:
        return 100
    return (200 * done + total) // (2 * total)


class FormEngine:
    """Holds the data record of one edit session.

    Values are coerced to the field type on input but never rejected: an
    invalid value is stored as typed and its error is kept alongside.
    """

    def __init__(self, template: DocumentTemplate, initial_data: Optional[dict] = None):
        self.template = template
        self._errors: dict[str, str] = {}

        if initial_data is None:
            self._data: dict[str, Any] = {
                f.name: f.default_value for f in template.fields if f.default_value is not None
            }
            self._state = SessionState.EMPTY
        else:
            self._data = dict(initial_data)
            self._state = SessionState.EDITING
            for name, value in self._data.items():
                field = template.get_field(name)
                if field is not None:
                    self._record_validity(field, value)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def data(self) -> dict[str, Any]:
        """Read-only view of the current record (a copy)"""
        return dict(self._data)

    @property
    def errors(self) -> dict[str, str]:
        """Errors of the fields edited so far"""
        return dict(self._errors)

    def value(self, name: str) -> Any:
        return self._data.get(name)

    def is_valid(self, name: str) -> bool:
        return name not in self._errors

    def _field(self, name: str):
        field = self.template.get_field(name)
        if field is None:
            raise UnknownFieldError(self.template.id, name)
        return field

    def _record_validity(self, field, value: Any) -> ValidationResult:
        result = validate_field(field, value)
        if result.valid:
            self._errors.pop(field.name, None)
        else:
            self._errors[field.name] = result.message
        return result

    def set_field(self, name: str, value: Any) -> ValidationResult:
        """Store a value for a field and recompute that field's validity"""
        field = self._field(name)
        stored, _ = field.coerce(value)
        self._data[name] = stored
        self._state = SessionState.EDITING
        result = self._record_validity(field, stored)
        if not result.valid:
            logger.debug(f"{self.template.id}.{name}: {result.message}")
        return result

    def clear_field(self, name: str) -> ValidationResult:
        return self.set_field(name, None)

    def validate_field(self, name: str, value: Any = _UNSET) -> ValidationResult:
        """Validate a value (default: the stored one) without storing it"""
        field = self._field(name)
        if value is _UNSET:
            value = self._data.get(name)
        return validate_field(field, value)

    def validate_all(self) -> dict[str, str]:
        """Errors for every field of the template, keyed by field name"""
        errors = {}
        for field in self.template.fields:
            result = validate_field(field, self._data.get(field.name))
            if not result.valid:
                errors[field.name] = result.message
        return errors

    def completion(self) -> int:
        """Percentage of required fields holding a value (validity not considered)"""
        required = self.template.required_fields
        done = sum(1 for f in required if not is_empty(self._data.get(f.name)))
        return _percent(done, len(required))

    def section_completion(self, section_id: str) -> int:
        required = [f for f in self.template.fields_for_section(section_id) if f.required]
        done = sum(1 for f in required if not is_empty(self._data.get(f.name)))
        return _percent(done, len(required))

    def missing_required(self) -> list[str]:
        return [f.name for f in self.template.required_fields if is_empty(self._data.get(f.name))]

    @property
    def can_generate(self) -> bool:
        """Full-document generation is offered only at 100% completion"""
        return self.completion() == 100

    def snapshot(self) -> dict[str, Any]:
        return dict(self._data)

    def mark_saved(self, complete: bool) -> None:
        self._state = SessionState.COMPLETE_SAVED if complete else SessionState.DRAFT_SAVED

    def save_draft(self) -> dict[str, Any]:
        """Snapshot the record as a draft, at any completion level"""
        snapshot = self.snapshot()
        self.mark_saved(complete=False)
        return snapshot

    def save_complete(self) -> SaveResult:
        """Snapshot the record if every field validates; otherwise return the errors"""
        errors = self.validate_all()
        if errors:
            return SaveResult(ok=False, errors=errors)
        snapshot = self.snapshot()
        self.mark_saved(complete=True)
        return SaveResult(ok=True, data=snapshot)
