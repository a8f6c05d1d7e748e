"""
Main FastAPI application for CareQueue backend.
"""

import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from carequeue.core.config import settings
from carequeue.core.exceptions import QueueError
from carequeue.core.logging import configure_logging, get_logger, request_logger
from carequeue.db.base import check_database_health, init_db
from carequeue.db.session import db_manager
from carequeue.api.v1 import queue


# Configure logging
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting CareQueue backend", version=settings.app_version)

    if settings.create_tables_on_startup:
        await init_db()
        logger.info("Database tables ensured")

    if not settings.skip_db_check:
        health = await check_database_health(db_manager.session_factory)
        if health["status"] != "healthy":
            logger.warning("Database health check failed", health=health)
        else:
            logger.info("Database connected successfully")
    else:
        logger.warning("Database check skipped (SKIP_DB_CHECK=1)")

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down CareQueue backend")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Reception queue API for the hospital management system",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests."""
    start_time = time.time()

    response = await call_next(request)

    process_time = time.time() - start_time
    await request_logger.log_request(request, response, process_time)

    return response


def jsonable_errors(errors):
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in errors
    ]


# Global exception handlers
@app.exception_handler(QueueError)
async def queue_exception_handler(request: Request, exc: QueueError):
    """Render queue errors as ``{message}`` with their status code."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Queue error",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        detail=exc.message,
        context=exc.context,
        path=request.url.path,
        method=request.method
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Reject malformed bodies as 400 ``{message}`` like other bad input."""
    logger.warning(
        "Validation error",
        path=request.url.path,
        method=request.method,
        errors=jsonable_errors(exc.errors())
    )
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request body"}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error(
        "Unhandled exception",
        exception=str(exc),
        path=request.url.path,
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={
            "message": "Internal server error",
            "detail": str(exc) if settings.debug else "An error occurred"
        }
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    db_health = await check_database_health(db_manager.session_factory)
    return {
        "status": "healthy" if db_health["status"] == "healthy" else "unhealthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "database": db_health["status"],
        "timestamp": db_health["timestamp"]
    }


# API routes
app.include_router(queue.router, prefix="/api/v1/receptionist", tags=["Reception Queue"])


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.app_name} API",
        "version": settings.app_version,
        "environment": settings.app_env,
        "docs": "/docs" if settings.debug else "Documentation not available in production"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "carequeue.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info" if not settings.debug else "debug"
    )
