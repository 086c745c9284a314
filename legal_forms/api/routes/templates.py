"""Template catalogue routes"""

from typing import Optional

from fastapi import APIRouter, HTTPException

from legal_forms.api.schemas import TemplateItem, TemplatesResponse
from legal_forms.models.template import DocumentTemplate
from legal_forms.services.documents import DocumentService

router = APIRouter(prefix="/api/templates", tags=["templates"])

# Shared service, set via init_service() from app.py
service: Optional[DocumentService] = None


def init_service(shared_service: DocumentService):
    global service
    service = shared_service


@router.get("", response_model=TemplatesResponse)
async def list_templates(category: Optional[str] = None):
    """List templates, optionally for one category"""
    try:
        templates = (
            service.registry.get_templates_by_category(category)
            if category and category != "all"
            else service.list_templates()
        )
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown category: {category}")
    return TemplatesResponse(templates=[
        TemplateItem(
            id=t.id,
            name=t.name,
            description=t.description,
            category=t.category.value,
            field_count=len(t.fields),
            required_count=len(t.required_fields),
        )
        for t in templates
    ])


@router.get("/{template_id}", response_model=DocumentTemplate)
async def get_template(template_id: str):
    """Full template definition: fields, validation rules and sections"""
    template = service.get_template(template_id)
    if template is None:
        raise HTTPException(status_code=404, detail=f"Template not found: {template_id}")
    return template
