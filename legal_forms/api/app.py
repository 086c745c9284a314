"""FastAPI application factory"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from legal_forms.api.routes import documents, sessions, templates
from legal_forms.api.schemas import HealthResponse
from legal_forms.api.session_store import SessionStore
from legal_forms.db import get_store
from legal_forms.services.documents import DocumentService
from legal_forms.services.registry import TemplateRegistry
from legal_forms.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    settings = settings or get_settings()
    service = DocumentService(TemplateRegistry.default(settings), get_store(settings))
    session_store = SessionStore(
        ttl_minutes=settings.session_ttl_minutes,
        max_sessions=settings.max_sessions,
    )

    app = FastAPI(
        title="Legal Forms API",
        description="Fill real estate document templates and generate PDFs",
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    templates.init_service(service)
    sessions.init_router(service, session_store, settings.output_dir)
    documents.init_router(service, settings.output_dir)

    app.include_router(templates.router)
    app.include_router(sessions.router)
    app.include_router(documents.router)

    @app.get("/api/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(
            status="ok",
            store_mode=settings.store_mode,
            active_sessions=session_store.active_count,
        )

    logger.info(f"API ready with {len(service.registry)} templates ({settings.store_mode} store)")
    return app
