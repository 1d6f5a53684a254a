"""
Strideboard - Main Application Entry Point
"""
from fastapi import FastAPI

import strideboard.modules  # noqa: F401  registers all models on the metadata
from strideboard.api.router import api_router
from strideboard.core.config import settings
from strideboard.core.events import lifespan
from strideboard.core.exceptions import setup_exception_handlers
from strideboard.core.logger import get_logger
from strideboard.core.metrics import metrics_endpoint
from strideboard.core.middleware import setup_middleware

logger = get_logger(__name__)


def create_application() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        swagger_ui_parameters={"persistAuthorization": True},
    )

    setup_middleware(app)
    setup_exception_handlers(app)

    app.include_router(api_router)

    if settings.metrics_enabled:
        app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "message": "Strideboard API",
            "version": settings.app_version,
            "environment": settings.environment,
            "api_version": "v1"
        }

    @app.get("/health")
    async def health():
        """Simple health check."""
        return {"status": "healthy"}

    logger.info("FastAPI application created and configured")
    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_config=None,  # Use our custom logging
    )
