"""Ferna FastAPI Application."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ferna.api.v1.auth import router as auth_router
from ferna.core.config import get_settings
from ferna.core.logging import configure_logging
from ferna.db.database import get_database

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging(settings.log_format, settings.log_level)
    logger.info("app_starting", version=settings.app_version)

    db = get_database()
    await db.create_tables()

    logger.info("app_started")

    yield

    logger.info("app_stopping")
    await db.dispose()
    logger.info("app_stopped")


app = FastAPI(
    title="Ferna",
    description="Houseplant care tracking API",
    version=get_settings().app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "name": "Ferna",
        "version": get_settings().app_version,
        "docs": "/docs",
    }
