"""Template registry: catalogue of document templates loaded from JSON"""

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from legal_forms.errors import TemplateNotFoundError
from legal_forms.models.template import DocumentTemplate, TemplateCategory
from legal_forms.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Directory containing the bundled template catalogue
BUNDLED_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


class TemplateRegistry:
    """Read-only catalogue of templates, looked up by id or category.

    Built once at startup and handed to the services that need it.
    """

    def __init__(self, templates: Iterable[DocumentTemplate]):
        self._templates: dict[str, DocumentTemplate] = {}
        for template in templates:
            if template.id in self._templates:
                raise ValueError(f"Duplicate template id: {template.id}")
            self._templates[template.id] = template

    @classmethod
    def from_directory(cls, templates_dir: str | Path) -> "TemplateRegistry":
        """Load all templates from JSON files, in file name order"""
        templates = []
        for template_file in sorted(Path(templates_dir).glob("*.json")):
            with open(template_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            templates.append(DocumentTemplate.model_validate(data))
            logger.debug(f"Loaded template {data.get('id')} from {template_file.name}")
        logger.info(f"Loaded {len(templates)} templates from {templates_dir}")
        return cls(templates)

    @classmethod
    def default(cls, settings: Optional[Settings] = None) -> "TemplateRegistry":
        """Registry from the configured directory, or the bundled catalogue"""
        settings = settings or get_settings()
        templates_dir = settings.templates_dir
        return cls.from_directory(templates_dir or BUNDLED_TEMPLATES_DIR)

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._templates

    def list_templates(self) -> list[DocumentTemplate]:
        """List available templates"""
        return list(self._templates.values())

    def get_template(self, template_id: str) -> Optional[DocumentTemplate]:
        """Get a template by id; None when unknown"""
        return self._templates.get(template_id)

    def require(self, template_id: str) -> DocumentTemplate:
        """Get a template by id or raise TemplateNotFoundError"""
        template = self._templates.get(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def get_templates_by_category(self, category: str | TemplateCategory) -> list[DocumentTemplate]:
        category = TemplateCategory(category)
        return [t for t in self._templates.values() if t.category == category]

    def categories(self) -> list[TemplateCategory]:
        """Unique categories, in catalogue order"""
        return list(dict.fromkeys(t.category for t in self._templates.values()))
