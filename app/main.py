"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.database import init_db, dispose_engine
from app.exceptions import ConfigurationError, ServiceAuthError
from app.logging_config import configure_logging
from app.routers import maintenance
from app.schemas.auto_cancel import AutoCancelFailure

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan events for the application.
    Handles startup and shutdown events.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    # Startup
    logger.info(f"🚀 Starting {settings.app_name}...")
    if settings.debug and settings.database_url:
        logger.info("📊 Initializing database...")
        await init_db()
        logger.info("✅ Database initialized successfully")
    logger.info(f"🌐 API available at: {settings.api_v1_prefix}")

    yield

    # Shutdown
    await dispose_engine()
    logger.info(f"👋 Shutting down {settings.app_name}...")


async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"❌ {exc.message}")
    return JSONResponse(
        status_code=500,
        content=AutoCancelFailure(error=ConfigurationError.public_message).model_dump(),
        headers=maintenance.CORS_HEADERS,
    )


async def service_auth_error_handler(request: Request, exc: ServiceAuthError):
    logger.warning(f"⚠️ Rejected maintenance call: {exc.message}")
    return JSONResponse(
        status_code=401,
        content=AutoCancelFailure(error=exc.message).model_dump(),
        headers={**maintenance.CORS_HEADERS, "WWW-Authenticate": "Bearer"},
    )


def create_app() -> FastAPI:
    """Build the application with routers, middleware and error handlers."""
    settings = get_settings()

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
    ## 🔧 Mobile Mechanic Maintenance API

    Scheduled maintenance operations for the mobile-mechanic booking product.

    ### Operations:
    * **Auto-cancel**: cancel pending appointments more than 15 minutes overdue
      and delete their mechanic quotes
    * **Preview**: list what the next auto-cancel run would touch
    """,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Configure CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(ConfigurationError, configuration_error_handler)
    application.add_exception_handler(ServiceAuthError, service_auth_error_handler)

    # Include routers
    application.include_router(maintenance.router, prefix=settings.api_v1_prefix)

    @application.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "docs": "/docs",
            "redoc": "/redoc",
        }

    @application.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.app_version,
        }

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
