"""Document template models.

Template fields form a tagged union discriminated on ``type``. Each variant
carries only the data it needs and knows how to coerce raw user input into
its stored representation.
"""

import math
import re
from datetime import date
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TemplateCategory(str, Enum):
    """Categories of document templates"""
    PURCHASE_AGREEMENT = "purchase-agreement"
    TERMINATION = "termination"
    COUNTER_OFFER = "counter-offer"
    DISCLOSURE = "disclosure"
    INSPECTION = "inspection"

    @property
    def display_name(self) -> str:
        return self.value.replace("-", " ").title()


class FieldType(str, Enum):
    """Input types a template field can declare"""
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    DATE = "date"
    NUMBER = "number"
    CURRENCY = "currency"
    CHECKBOX = "checkbox"
    SIGNATURE = "signature"


NUMERIC_TYPES = frozenset({FieldType.NUMBER, FieldType.CURRENCY})
STRING_TYPES = frozenset({FieldType.TEXT, FieldType.TEXTAREA})

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TRUE_STRINGS = {"true", "yes", "on", "1", "y", "x"}
_FALSE_STRINGS = {"false", "no", "off", "0", "n", ""}

CoerceResult = tuple[Any, Optional[str]]


class FieldValidation(BaseModel):
    """Optional validation rules attached to a field"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    pattern: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None

    @property
    def has_numeric_bounds(self) -> bool:
        return self.min is not None or self.max is not None


class BaseField(BaseModel):
    """Attributes shared by every field variant"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str                       # record key, unique within a template
    label: str
    required: bool = False
    placeholder: Optional[str] = None
    default_value: Any = None
    validation: Optional[FieldValidation] = None

    @property
    def field_type(self) -> FieldType:
        return FieldType(self.type)

    @model_validator(mode="after")
    def _check_numeric_bounds(self):
        if (self.validation is not None and self.validation.has_numeric_bounds
                and self.field_type not in NUMERIC_TYPES):
            raise ValueError(
                f"Field '{self.name}': min/max apply only to number or currency fields")
        return self

    def coerce(self, value: Any) -> CoerceResult:
        """Convert raw input to the stored value.

        Returns ``(stored_value, type_error)``. Input that cannot be
        converted is returned unchanged together with an error message.
        """
        return value, None


class _StringField(BaseField):
    def coerce(self, value: Any) -> CoerceResult:
        if value is None or isinstance(value, str):
            return value, None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value), None
        return value, f"{self.label} must be text"


class TextField(_StringField):
    type: Literal["text"] = "text"


class TextareaField(_StringField):
    type: Literal["textarea"] = "textarea"
    structured: bool = False        # also accepts line items (list or dict)

    def coerce(self, value: Any) -> CoerceResult:
        if self.structured and isinstance(value, (list, dict)):
            return value, None
        return super().coerce(value)


class SelectField(BaseField):
    type: Literal["select"] = "select"
    options: tuple[str, ...] = Field(min_length=1)

    def match_option(self, value: str) -> Optional[str]:
        """Find the declared option matching value, ignoring case and dashes"""
        wanted = value.strip().lower()
        for option in self.options:
            lowered = option.lower()
            if wanted in (lowered, lowered.replace(" ", "-")):
                return option
        return None

    def coerce(self, value: Any) -> CoerceResult:
        if value is None or value == "":
            return value, None
        if isinstance(value, str):
            option = self.match_option(value)
            if option is not None:
                return option, None
        return value, f"{self.label} must be one of: {', '.join(self.options)}"


class DateField(BaseField):
    type: Literal["date"] = "date"

    def coerce(self, value: Any) -> CoerceResult:
        if value is None or value == "":
            return value, None
        if isinstance(value, date):
            return value.isoformat(), None
        if isinstance(value, str) and _ISO_DATE.match(value.strip()):
            try:
                return date.fromisoformat(value.strip()).isoformat(), None
            except ValueError:
                pass
        return value, f"{self.label} must be a valid date (YYYY-MM-DD)"


class _NumericField(BaseField):
    def coerce(self, value: Any) -> CoerceResult:
        if value is None or value == "":
            return value, None
        if isinstance(value, bool):
            return value, f"{self.label} must be a number"
        if isinstance(value, (int, float)):
            if isinstance(value, float) and not math.isfinite(value):
                return value, f"{self.label} must be a number"
            return value, None
        if isinstance(value, str):
            cleaned = value.strip().lstrip("$").replace(",", "")
            try:
                return int(cleaned), None
            except ValueError:
                pass
            try:
                number = float(cleaned)
            except ValueError:
                return value, f"{self.label} must be a number"
            if math.isfinite(number):
                return number, None
        return value, f"{self.label} must be a number"


class NumberField(_NumericField):
    type: Literal["number"] = "number"


class CurrencyField(_NumericField):
    type: Literal["currency"] = "currency"


class CheckboxField(BaseField):
    type: Literal["checkbox"] = "checkbox"

    def coerce(self, value: Any) -> CoerceResult:
        if value is None or isinstance(value, bool):
            return value, None
        if isinstance(value, (int, float)):
            return bool(value), None
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True, None
            if lowered in _FALSE_STRINGS:
                return False, None
        return value, f"{self.label} must be checked or unchecked"


class SignatureField(BaseField):
    """Captured signature, stored verbatim as an opaque data URI"""
    type: Literal["signature"] = "signature"

    def coerce(self, value: Any) -> CoerceResult:
        if value is None or isinstance(value, str):
            return value, None
        return value, f"{self.label} must be a signature image"


TemplateField = Annotated[
    Union[
        TextField,
        TextareaField,
        SelectField,
        DateField,
        NumberField,
        CurrencyField,
        CheckboxField,
        SignatureField,
    ],
    Field(discriminator="type"),
]


class TemplateSection(BaseModel):
    """Presentation grouping of field ids"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    title: str
    fields: tuple[str, ...]
    description: Optional[str] = None


class DocumentTemplate(BaseModel):
    """A document template: field schema plus optional sections"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str
    description: str
    category: TemplateCategory
    fields: tuple[TemplateField, ...]
    sections: tuple[TemplateSection, ...] = ()

    @model_validator(mode="after")
    def _check_fields_and_sections(self):
        names = set()
        ids = set()
        for field in self.fields:
            if field.name in names:
                raise ValueError(f"Duplicate field name '{field.name}' in template '{self.id}'")
            names.add(field.name)
            ids.add(field.id)

        seen = {}
        for section in self.sections:
            for field_id in section.fields:
                if field_id not in ids:
                    raise ValueError(
                        f"Section '{section.id}' references unknown field '{field_id}'")
                if field_id in seen:
                    raise ValueError(
                        f"Field '{field_id}' appears in sections '{seen[field_id]}' and '{section.id}'")
                seen[field_id] = section.id
        return self

    @property
    def required_fields(self) -> list:
        return [f for f in self.fields if f.required]

    def get_field(self, name: str):
        """Get a field by record name"""
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def get_section(self, section_id: str) -> Optional[TemplateSection]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def fields_for_section(self, section_id: str) -> list:
        """Fields of a section, in template declaration order"""
        section = self.get_section(section_id)
        if section is None:
            return []
        return [f for f in self.fields if f.id in section.fields]
