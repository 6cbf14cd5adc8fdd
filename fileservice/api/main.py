"""
File Service - Main Application Entry Point

FastAPI application for browsing S3 buckets and PostgreSQL databases and
importing their data into local storage with pollable progress.

Run with:
    uvicorn fileservice.api.main:app --port 8080
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..utils import setup_logging
from .config import settings

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.info(f"Loading environment from: {settings.PROJECT_ROOT / '.env'}")


# =============================================
# Import Dependencies and Routes
# =============================================

from .dependencies import cleanup_services, initialize_services
from .exception_handlers import register_exception_handlers
from .routes import files_router, postgres_router, progress_router, s3_router


# =============================================
# Application Lifespan
# =============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize_services(app)
    yield
    cleanup_services(app)


# =============================================
# Application Factory
# =============================================

def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_TITLE,
        version=settings.APP_VERSION,
        description=settings.APP_DESCRIPTION,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(s3_router, prefix="/rest", tags=["S3"])
    app.include_router(postgres_router, prefix="/rest", tags=["PostgreSQL"])
    app.include_router(progress_router, prefix="/rest", tags=["Import Progress"])
    app.include_router(files_router, prefix="/rest", tags=["Files"])

    register_exception_handlers(app)
    register_basic_routes(app)

    return app


# =============================================
# Basic Routes Registration
# =============================================

def register_basic_routes(app: FastAPI):

    @app.get("/api/info")
    async def api_info():
        return {
            "service": settings.APP_TITLE,
            "version": settings.APP_VERSION,
            "status": "running",
            "endpoints": {
                "s3": "/rest/list-s3",
                "postgres": "/rest/list-postgres",
                "progress": "/rest/import-progress/{jobId}",
                "files": "/rest/list",
                "health": "/health",
                "docs": "/docs"
            }
        }

    @app.get("/health")
    async def health_check():
        registry = getattr(app.state, "job_registry", None)
        storage_ok = settings.upload_path.is_dir()
        return {
            "status": "healthy" if registry is not None and storage_ok else "degraded",
            "service": settings.APP_TITLE,
            "version": settings.APP_VERSION,
            "storage": "healthy" if storage_ok else "missing",
            "active_imports": len(registry.list_active()) if registry is not None else 0,
        }


app = create_app()
