"""
Module: main.py
Description: FastAPI application entry point for the roaster simulator.

Initializes the FastAPI application with the session routes and the
error handlers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from roastsim.config.settings import settings
from roastsim.handlers.sessions import router as sessions_router
from roastsim.utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown logging."""
    logger.info(
        "Starting roaster simulator",
        version=settings.app_version,
        store_backend=settings.session_store_backend
    )
    yield
    logger.info("Shutting down roaster simulator")


app = FastAPI(
    title=settings.app_name,
    description="Coffee roaster training simulator with result delivery to the session callback",
    version=settings.app_version,
    lifespan=lifespan
)

app.include_router(sessions_router)


@app.get("/health")
async def health_check():
    """Basic application health information."""
    logger.debug("Health check requested")

    return {
        "status": "ok",
        "message": "Roaster simulator is healthy",
        "version": settings.app_version
    }


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Global HTTP exception handler.

    Logs HTTP exceptions and returns structured error responses.
    """
    logger.warning(
        "HTTP exception occurred",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.status_code,
                "message": exc.detail,
                "type": "http_exception"
            }
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(
        "Unhandled exception occurred",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": 500,
                "message": "Internal server error",
                "type": "internal_error"
            }
        }
    )
