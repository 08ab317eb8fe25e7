"""
Main FastAPI application.

This module initializes the FastAPI application with middleware,
routers, and error handlers.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fair_directory.api.routers import duplicates, favorites, health
from fair_directory.core.config import settings
from fair_directory.core.database import engine
from fair_directory.observability import setup_observability
from fair_directory.services.duplicates.exceptions import (
    DuplicateError,
    DuplicateValidationError,
    EntityNotFoundError,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log startup and dispose of the engine pool on shutdown."""
    logger.info(
        f"Starting {settings.APP_NAME} v{settings.APP_VERSION}",
        extra={"debug": settings.DEBUG, "api_prefix": settings.API_V1_PREFIX},
    )

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await engine.dispose()
    logger.info("Database engine disposed")


# Initialize FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""Duplicate detection and entity merging for the fair directory catalog""",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=settings.DEBUG
)


# Setup observability (tracing, metrics, logging)
# Must be called before other middleware to ensure all requests are instrumented
setup_observability(app)


# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


# Exception handlers
#
# Every error leaves the API in one envelope:
#   {"error": {"code": <status>, "message": ..., "type": ...[, "details": ...]}}


def error_response(
    status_code: int,
    message: Any,
    error_type: str,
    headers: dict[str, str] | None = None,
    **fields: Any,
) -> JSONResponse:
    """Build the structured error envelope."""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": status_code, "message": message, "type": error_type, **fields}},
        headers=headers,
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without the non-serializable `ctx` payloads."""
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


# Domain errors that escape a router map by type; anything else is a 500
DOMAIN_ERROR_STATUS: dict[type[DuplicateError], tuple[int, str]] = {
    EntityNotFoundError: (status.HTTP_404_NOT_FOUND, "not_found"),
    DuplicateValidationError: (status.HTTP_400_BAD_REQUEST, "validation_error"),
}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Headers carry WWW-Authenticate on 401s
    return error_response(exc.status_code, exc.detail, "http_exception", headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        "validation_error",
        details=jsonable_errors(exc),
    )


@app.exception_handler(DuplicateError)
async def duplicate_exception_handler(request: Request, exc: DuplicateError) -> JSONResponse:
    code, error_type = next(
        (mapped for cls, mapped in DOMAIN_ERROR_STATUS.items() if isinstance(exc, cls)),
        (status.HTTP_500_INTERNAL_SERVER_ERROR, "merge_failed"),
    )
    return error_response(code, str(exc), error_type)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception: {exc}", exc_info=exc)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "internal_error"
    )


# Include routers
app.include_router(health.router, prefix=settings.API_V1_PREFIX)
app.include_router(duplicates.router, prefix=settings.API_V1_PREFIX)
app.include_router(favorites.router, prefix=settings.API_V1_PREFIX)


# Root endpoint
@app.get(
    "/",
    tags=["root"],
    summary="Root endpoint",
    description="Returns basic information about the API"
)
async def root() -> dict[str, str]:
    """
    Root endpoint providing basic API information.

    Returns:
        dict: Basic API information
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": f"{settings.API_V1_PREFIX}/health"
    }


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "fair_directory.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
    )


if __name__ == "__main__":
    run()
