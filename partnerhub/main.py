"""
PartnerHub - accountability partner matching

FastAPI application exposing preferences, matching, partnerships, shared
goals, partner tasks and notifications.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.deps import status_for
from .api.router import api_router
from .config import Settings, get_settings
from .infra.db.session import Database
from .services.errors import PartnerHubError
from .utils.logging_utils import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting PartnerHub API server...")

    database: Database = app.state.db
    await database.create_all()
    logger.info("Database tables initialized")

    yield

    await database.dispose()
    logger.info("Shutting down PartnerHub API server...")


async def partnerhub_error_handler(request: Request, exc: PartnerHubError) -> JSONResponse:
    return JSONResponse(
        status_code=status_for(exc.code),
        content={"detail": {"message": exc.message, "error_code": exc.code.value}},
    )


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Defaults to get_settings()
        database: Defaults to a Database built from settings
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="Accountability partner matching, shared goals and task verification",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.db = database or Database.from_settings(settings)

    # CORS middleware for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PartnerHubError, partnerhub_error_handler)
    app.include_router(api_router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "api": "/api/v1",
        }

    return app
