"""
Hirewise API - Main Application Entry Point

This module initializes the FastAPI application with:
- Service container (database, stores, generation, tracker, orchestrator)
- Database schema initialization
- CORS middleware for frontend communication
- Prometheus metrics and exception handlers
- API router registration

Architecture:
    FastAPI App
    ├── Lifespan Management (startup/shutdown)
    ├── CORS Middleware
    ├── Prometheus Middleware (/metrics)
    └── API Router
        ├── /resume-parse, /resume-parse-status - Resume intake jobs
        └── /api/search/summary - Candidate match rationale
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from hirewise.api import api_router
from hirewise.config import Settings, get_settings
from hirewise.container import ServiceContainer, build_container
from hirewise.exceptions import register_exception_handlers
from hirewise.middleware.metrics import setup_metrics

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle events.

    Startup:
        1. Initialize database tables

    Shutdown:
        1. Dispose of the database engine
    """
    container: ServiceContainer = app.state.container
    await container.database.init_db()
    yield
    await container.database.dispose()


def create_app(settings: Optional[Settings] = None, container: Optional[ServiceContainer] = None) -> FastAPI:
    settings = settings or (container.settings if container else get_settings())
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Hirewise API",
        description="Resume intake tracking and candidate match explanations",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = container or build_container(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_metrics(app)
    register_exception_handlers(app)

    app.include_router(api_router)

    @app.get("/health")
    async def health_check(request: Request):
        return {
            "status": "healthy",
            "generation_configured": request.app.state.container.generation_configured,
        }

    return app


app = create_app()
