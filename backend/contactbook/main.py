"""
Contact Book API entry point.
Wires logging, CORS, the /api/v1 routers, the error handlers and the startup checks.
"""

import logging
import os
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request as StarletteRequest

from contactbook.api.v1.endpoints import auth
from contactbook.api.v1.routes import api_router
from contactbook.core.config import get_settings
from contactbook.core.errors import ContactBookError, ValidationError
from contactbook.core.preferences import init_preferences
from contactbook.schemas.common import ErrorDetail

API_VERSION = "1.0.0"


def _configure_logging() -> logging.Logger:
    """Send every contactbook.* logger to stdout so request and service logs show up in deploy logs."""
    package_logger = logging.getLogger("contactbook")
    package_logger.setLevel(logging.INFO)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter("%(levelname)s:     %(message)s"))
        package_logger.addHandler(handler)
    package_logger.propagate = True
    return package_logger


logger = _configure_logging()
settings = get_settings()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One line per request: method, path, status and duration."""

    async def dispatch(self, request: StarletteRequest, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Contact Book API %s starting (%s)", API_VERSION, settings.ENVIRONMENT)
    if settings.in_memory:
        logger.warning("No Supabase project configured; using the in-memory backend")
    elif settings.ENVIRONMENT == "production":
        settings.validate_for_production()
    preferences = init_preferences(Path(settings.preferences_path))
    logger.info("Theme preference: %s", preferences.theme)
    yield
    logger.info("Contact Book API stopped")


app = FastAPI(
    title="Contact Book API",
    version=API_VERSION,
    description="Personal contacts with Supabase auth, database and storage.",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.exception_handler(ContactBookError)
async def contactbook_error_handler(request: Request, exc: ContactBookError):
    body = ErrorDetail(
        detail=exc.message,
        errors=exc.errors if isinstance(exc, ValidationError) else None,
    )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


@app.middleware("http")
async def unhandled_errors(request: Request, call_next):
    """Anything the handlers above did not map becomes a logged 500."""
    try:
        return await call_next(request)
    except Exception as exc:
        logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/")
def root():
    return {
        "message": "Contact Book API",
        "version": API_VERSION,
        "docs": "/docs",
        "endpoints": {
            "auth": "/api/v1/auth",
            "contacts": "/api/v1/contacts",
            "profile": "/api/v1/profile",
            "countries": "/api/v1/countries",
            "settings": "/api/v1/settings",
        },
    }


@app.get("/health")
def health():
    return {"status": "healthy"}


app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])
app.include_router(api_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "contactbook.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
    )
