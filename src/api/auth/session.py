"""Session cookie policy. Signing is left to Starlette's SessionMiddleware."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from src.core.constants import (
    SESSION_COOKIE_NAME,
    SESSION_COOKIE_PATH,
    SESSION_MAX_AGE_SECONDS,
    SESSION_SAME_SITE,
)


@dataclass(frozen=True)
class SessionPolicy:
    secret_key: str
    secure: bool
    max_age: int = SESSION_MAX_AGE_SECONDS
    path: str = SESSION_COOKIE_PATH
    same_site: str = SESSION_SAME_SITE
    cookie_name: str = SESSION_COOKIE_NAME

    def middleware_kwargs(self) -> dict[str, Any]:
        # SessionMiddleware always sets HttpOnly on its cookie.
        return {
            "secret_key": self.secret_key,
            "session_cookie": self.cookie_name,
            "max_age": self.max_age,
            "path": self.path,
            "same_site": self.same_site,
            "https_only": self.secure,
        }


def install_session_store(app: FastAPI, policy: SessionPolicy) -> None:
    app.add_middleware(SessionMiddleware, **policy.middleware_kwargs())
