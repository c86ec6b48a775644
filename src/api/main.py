"""Gatehouse FastAPI application — entry point for the API server."""

from __future__ import annotations

import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import Settings, get_settings
from src.api.auth.context import AuthContext, new_auth
from src.api.auth.session import install_session_store
from src.api.middleware import RequestLoggingMiddleware
from src.core.constants import (
    CORS_ALLOWED_HEADERS,
    CORS_ALLOWED_METHODS,
    CORS_MAX_AGE_SECONDS,
)
from src.core.interfaces import DatabaseService
from src.core.logging import get_logger
from src.data.db import new_database_service

log = get_logger(__name__)


def split_origins(origins: list[str]) -> tuple[list[str], str | None]:
    """Separate exact origins from ``*`` patterns; patterns become one regex."""
    exact = [o for o in origins if "*" not in o]
    patterns = [
        ".*".join(re.escape(part) for part in o.split("*"))
        for o in origins
        if "*" in o
    ]
    regex = "|".join(f"(?:{p})" for p in patterns) if patterns else None
    return exact, regex


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Close the database collaborator on shutdown."""
    log.info("api_starting", port=app.state.settings.bound_port)
    yield
    await app.state.db.close()
    log.info("api_shutdown")


async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    log.error("unhandled_error", path=request.url.path, error=repr(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


def create_app(
    settings: Settings | None = None,
    db: DatabaseService | None = None,
    auth: AuthContext | None = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    if settings is None:
        settings = get_settings()
    if db is None:
        db = new_database_service(settings)
    if auth is None:
        auth = new_auth(settings)

    app = FastAPI(
        title="Gatehouse API",
        description="Backend starter: hello world, health, and OAuth login",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.db = db
    app.state.auth = auth

    app.add_exception_handler(Exception, unhandled_error)

    # Added innermost first: session, then CORS, then request logging.
    install_session_store(app, auth.session)

    exact_origins, origin_regex = split_origins(settings.allowed_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=exact_origins,
        allow_origin_regex=origin_regex,
        allow_credentials=True,
        allow_methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
        max_age=CORS_MAX_AGE_SECONDS,
    )

    app.add_middleware(RequestLoggingMiddleware)

    # Register routers
    from src.api.routes.auth import router as auth_router
    from src.api.routes.health import router as health_router
    from src.api.routes.root import router as root_router

    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(auth_router)

    return app
