"""
FastAPI Application Entry Point

Builds the FastAPI app, wires the database pool into it,
configures middleware and exception handlers, and includes all routers.
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from user_service.config import Settings, get_settings
from user_service.database import Database
from user_service.errors import ConfigError, ServiceError
from user_service.routers import health, users

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration; read from the environment when omitted
        database: Gateway to use; a new asyncpg-backed one when omitted
    """
    if settings is None:
        settings = get_settings()
    if database is None:
        database = Database(settings)

    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        - Startup: open the database connection pool
        - Shutdown: close it
        """
        logger.info("Starting User Service...")
        await database.connect()
        logger.info("User Service started successfully")

        yield

        logger.info("Shutting down User Service...")
        await database.disconnect()
        logger.info("User Service stopped")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
        # User Service API

        Creates users. Each creation writes an audit log row and the user
        row in a single PostgreSQL transaction.
        """,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.database = database

    # ========================================================================
    # Middleware
    # ========================================================================

    @app.middleware("http")
    async def add_request_timing(request: Request, call_next):
        """Add request timing header for monitoring."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all incoming requests."""
        logger.debug(f"{request.method} {request.url.path}")
        response = await call_next(request)
        return response

    # ========================================================================
    # Exception Handlers
    # ========================================================================

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed JSON or a missing/invalid field."""
        logger.info(f"Rejected request body on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid request body"}
        )

    @app.exception_handler(ServiceError)
    async def service_exception_handler(request: Request, exc: ServiceError):
        """
        Storage and connection failures.

        The transaction has already been rolled back by the time this runs.
        Details are logged, never returned.
        """
        logger.error(f"Request failed on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Returns generic error responses to prevent information leakage."""
        logger.exception(f"Unhandled exception: {exc}")

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    # ========================================================================
    # Routers
    # ========================================================================

    app.include_router(users.router)
    app.include_router(health.router)

    @app.get("/", response_class=PlainTextResponse, tags=["root"])
    async def root():
        return "Hello, World!"

    return app


def run() -> None:
    """Console entry point: load settings and serve with uvicorn."""
    import uvicorn

    try:
        settings = get_settings()
    except ConfigError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.critical(str(e))
        sys.exit(1)

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
