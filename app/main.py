# 📄 File: app/main.py
#
# 🧭 Purpose (Layman Explanation):
# The main control center that starts the plant scanner service, connects the database,
# builds the plant identification pipeline, and makes sure everything shuts down cleanly.
#
# 🧪 Purpose (Technical Summary):
# FastAPI application factory and entry point: logging setup, database and identification service
# lifecycle bound to the lifespan, middleware, router registration and exception handlers.
#
# 🔗 Dependencies:
# - FastAPI framework, uvicorn
# - app.shared.config.settings
# - app.shared.infrastructure.database.connection
# - app.modules.plant_identification.infrastructure.service_factory
#
# 🔄 Connected Modules / Calls From:
# - uvicorn server startup
# - Docker container entry point

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.middleware.logging import RequestLoggingMiddleware
from app.api.v1.router import api_v1_router
from app.modules.plant_identification.infrastructure.service_factory import create_identification_service
from app.shared.config.settings import Settings, get_settings
from app.shared.core.exceptions import PlantCareException
from app.shared.infrastructure.database.connection import DatabaseConnectionManager
from app.shared.utils.logging import get_logger, log_shutdown_event, log_startup_event, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Builds the database connection manager and the identification service once
    per process and keeps them on app.state.
    """
    settings: Settings = app.state.settings

    setup_logging(
        log_level=settings.LOG_LEVEL,
        log_format=settings.LOG_FORMAT,
        log_file=settings.LOG_FILE,
    )
    log_startup_event(settings.APP_NAME, settings.APP_VERSION, extra={"environment": settings.ENVIRONMENT})

    db_manager = DatabaseConnectionManager(settings)
    service = None

    try:
        await db_manager.initialize(create_tables=not settings.is_production)
        app.state.db_manager = db_manager
        logger.info("✅ Database connection initialized")

        service = create_identification_service(settings, db_manager.session_factory)
        await service.startup()
        app.state.identification_service = service
        logger.info("✅ Identification service initialized")

        yield

    except Exception as e:
        logger.error(f"❌ Startup failed: {e}", exc_info=True)
        raise

    finally:
        log_shutdown_event(settings.APP_NAME)
        app.state.identification_service = None

        try:
            if service is not None:
                await service.shutdown()
            await db_manager.close()
            logger.info("✅ Plant Scanner API shutdown complete")
        except Exception as e:
            logger.error(f"❌ Shutdown error: {e}")


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory function.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )
    app.state.settings = settings

    # =========================================================================
    # MIDDLEWARE CONFIGURATION
    # =========================================================================

    if not settings.is_testing:
        app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # =========================================================================
    # ROUTER REGISTRATION
    # =========================================================================

    app.include_router(api_v1_router, prefix="/api/v1")

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================

    @app.exception_handler(PlantCareException)
    async def plant_care_exception_handler(request: Request, exc: PlantCareException) -> JSONResponse:
        """Render pipeline failures as {success: false, error, error_code}."""
        if exc.status_code >= 500:
            logger.warning(f"{exc.error_code}: {exc.message}", details=exc.details)

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": getattr(exc, "user_message", None) or exc.message,
                "error_code": exc.error_code,
                "details": exc.details,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "request_id": getattr(request.state, "request_id", None),
            },
        )

    @app.exception_handler(500)
    async def internal_server_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Internal server error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "An internal server error occurred",
                "error_code": "INTERNAL_SERVER_ERROR",
                "request_id": getattr(request.state, "request_id", None),
            },
        )

    # =========================================================================
    # ROOT ENDPOINTS
    # =========================================================================

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs_url": "/docs" if settings.DEBUG else None,
            "health_check": "/api/v1/health",
            "api_base": "/api/v1",
        }

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=204)

    return app


app = create_application()


def main():
    """Run the development server (python -m app.main)."""
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD and settings.is_development,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
