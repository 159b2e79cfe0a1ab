"""FastAPI application initialization and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.database import close_db, engine, init_db, ping_db
from .core.exceptions import register_exception_handlers
from .core.middleware import setup_middleware
from .core.observability import (
    SERVICE_NAME,
    SERVICE_VERSION,
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_metrics,
    setup_structured_logging,
    setup_tracing,
)
from .routers import metrics, otp, tour, upload
from .services.mail_service import Mailer, SMTPMailer
from .services.storage_service import ObjectStorage, S3ObjectStorage
from .services.token_service import TokenSigner

# Configure structured logging
setup_structured_logging()

# Configure traditional logging for compatibility
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown events for the FastAPI application.
    """
    logger.info("Starting FastAPI application")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")

    try:
        setup_tracing()
        setup_metrics()
        instrument_sqlalchemy(engine)
        logger.info("Observability setup completed")

        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down FastAPI application")

    try:
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during application cleanup: {e}")

    logger.info("Application shutdown complete")


def create_app(
    object_storage: Optional[ObjectStorage] = None,
    mailer: Optional[Mailer] = None,
    token_signer: Optional[TokenSigner] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Service handles not passed in are built from settings. They live on
    ``app.state`` for the lifetime of the app and reach route handlers through
    the dependencies in ``core.dependencies``.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Tour Content API",
        description="Tour metadata and image storage, tour listings, and email OTP assertions",
        version=SERVICE_VERSION,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.object_storage = object_storage or S3ObjectStorage.from_settings(settings)
    app.state.mailer = mailer or SMTPMailer.from_settings(settings)
    app.state.token_signer = token_signer or TokenSigner.from_settings(settings)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    setup_middleware(app, enable_logging=True)

    instrument_fastapi(app)

    register_exception_handlers(app)

    @app.get(
        "/health",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Health Check",
        response_model=dict,
    )
    async def health_check():
        """Liveness probe."""
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "environment": settings.environment,
        }

    @app.get(
        "/ready",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Readiness Check",
        response_model=dict,
    )
    async def readiness_check(request: Request):
        """Check the database and report which service handles are wired."""
        state = request.app.state
        database_ok = await ping_db()
        body = {
            "status": "ready" if database_ok else "not_ready",
            "service": SERVICE_NAME,
            "checks": {
                "database": "ok" if database_ok else "unavailable",
                "object_storage": type(state.object_storage).__name__,
                "mailer": type(state.mailer).__name__,
                "token_signer": type(state.token_signer).__name__,
            },
        }
        if not database_ok:
            return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
        return body

    @app.get(
        "/info",
        status_code=status.HTTP_200_OK,
        tags=["Info"],
        summary="Service Information",
        response_model=dict,
    )
    async def service_info():
        """Service description and endpoint map."""
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "environment": settings.environment,
            "features": {
                "token_required_for_writes": settings.require_token_for_writes,
                "upload_max_files": settings.upload_max_files,
                "tour_max_files": settings.tour_max_files,
            },
            "endpoints": {
                "upload": "/api/upload",
                "send_otp": "/api/sendOTP",
                "save_tour": "/api/saveTour",
                "tours": "/api/getRatings",
                "tour_titles": "/api/getTourTitles",
                "tour_details": "/api/getTourDetails/{tourId}",
                "update_tour": "/api/updateTour/{tourId}",
                "health": "/health",
                "readiness": "/ready",
                "metrics": "/metrics",
                "docs": "/docs" if settings.debug else None,
            },
        }

    # Register API routers
    app.include_router(upload.router)
    app.include_router(otp.router)
    app.include_router(tour.router)
    app.include_router(metrics.router)

    logger.info("FastAPI application created and configured")

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tourdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
