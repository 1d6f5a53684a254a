"""
Application startup and shutdown event handlers.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from strideboard.core.config import settings
from strideboard.core.database import db_manager
from strideboard.core.logger import configure_logging, get_logger

logger = get_logger("events")


async def startup_tasks() -> None:
    """Tasks to run on application startup."""
    configure_logging()

    # Migrations own the schema everywhere except local SQLite setups
    if settings.is_sqlite or settings.is_development:
        await db_manager.create_tables()

    logger.info(
        "Application started successfully",
        environment=settings.environment,
        debug=settings.debug,
        database=settings.database_url.split("@")[-1]
    )


async def shutdown_tasks() -> None:
    """Tasks to run on application shutdown."""
    await db_manager.close()
    logger.info("Application shutdown completed successfully")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.
    Handles startup and shutdown events.
    """
    await startup_tasks()
    try:
        yield
    finally:
        await shutdown_tasks()
