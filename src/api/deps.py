"""FastAPI dependency injection — shared instances built by ``create_app``."""

from __future__ import annotations

from fastapi import Request

from config.settings import Settings
from src.api.auth.context import AuthContext
from src.core.interfaces import DatabaseService


def get_app_settings(request: Request) -> Settings:
    """Provide the settings the app was built with."""
    return request.app.state.settings


def get_database(request: Request) -> DatabaseService:
    """Provide the database collaborator."""
    return request.app.state.db


def get_auth(request: Request) -> AuthContext:
    """Provide the provider registry and session policy."""
    return request.app.state.auth
