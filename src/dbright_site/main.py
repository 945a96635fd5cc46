# src/dbright_site/main.py
"""Main entry point for the Dbright Services site backend."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from dbright_site.api import (
    admin_export_router,
    admin_login_router,
    admin_messages_router,
    admin_stats_router,
    contact_router,
)
from dbright_site.core.logging import configure_logging, report_environment
from dbright_site.core.settings import settings
from dbright_site.db.session import SessionLocal
from dbright_site.services.auth import SessionAuthenticator
from dbright_site.services.errors import DbrightError, RateLimited
from dbright_site.services.notifications import ContactNotifier
from dbright_site.services.rate_limiter import LoginRateLimiter, RateLimitSweeper
from dbright_site.services.store import MessageStore

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Contact intake and operator console for the Dbright Services website",
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

app.include_router(contact_router)
app.include_router(admin_login_router)
app.include_router(admin_messages_router)
app.include_router(admin_export_router)
app.include_router(admin_stats_router)

# Process-wide services; tests replace them through dependency overrides
app.state.store = MessageStore(SessionLocal, timezone_name=settings.site_timezone)
app.state.rate_limiter = LoginRateLimiter()
app.state.authenticator = SessionAuthenticator(settings, app.state.rate_limiter)
app.state.notifier = ContactNotifier(settings)
app.state.sweeper = None


@app.exception_handler(DbrightError)
async def handle_service_error(request: Request, exc: DbrightError) -> JSONResponse:
    """Translate service failures into their HTTP status and public detail."""
    content: dict[str, object] = {"detail": exc.public_detail}
    headers: dict[str, str] | None = None
    if isinstance(exc, RateLimited):
        content["retry_after"] = exc.retry_after
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and parameters as 400."""
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "errors": errors},
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging(settings)
    report_environment(settings)

    result = app.state.store.ensure_schema()
    if not result.success:
        # Requests retry the schema check lazily
        logger.error("Schema initialization failed: %s", result.error)

    sweeper = RateLimitSweeper(app.state.rate_limiter, settings.rate_limit_sweep_seconds)
    await sweeper.start()
    app.state.sweeper = sweeper


@app.on_event("shutdown")
async def on_shutdown() -> None:
    sweeper: RateLimitSweeper | None = getattr(app.state, "sweeper", None)
    if sweeper:
        await sweeper.stop()


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
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("dbright_site.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
