# src/phoenix_blog/main.py
"""Main entry point for the Phoenix Blog application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from phoenix_blog.api.v1 import payments_router, posts_router, tags_router
from phoenix_blog.core.logging_config import configure_logging
from phoenix_blog.core.settings import settings
from phoenix_blog.services.errors import (
    GatewayError,
    InvalidStateError,
    NotFoundError,
    PhoenixError,
    SignatureMismatchError,
    UnauthorizedError,
)
from phoenix_blog.services.razorpay import close_razorpay_client

logger = logging.getLogger(__name__)

# Most specific first; the first matching class decides the status code.
_ERROR_STATUS: tuple[tuple[type[PhoenixError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (SignatureMismatchError, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_403_FORBIDDEN),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (GatewayError, status.HTTP_502_BAD_GATEWAY),
)

# Initialize FastAPI app
app = FastAPI(
    title="Phoenix Blog API",
    description="Blog feed, premium gating and payments API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(payments_router, prefix="/api/v1")
app.include_router(tags_router, prefix="/api/v1")


def status_for(error: PhoenixError) -> int:
    """Return the HTTP status a domain error maps onto."""
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(PhoenixError)
async def handle_domain_error(request: Request, exc: PhoenixError) -> JSONResponse:
    """Render service errors as ``{"detail", "code"}`` bodies."""
    status_code = status_for(exc)
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    logger.info("%s %s starting", settings.app_name, settings.app_version)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await close_razorpay_client()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("phoenix_blog.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
