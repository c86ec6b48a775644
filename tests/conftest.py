"""Pytest configuration, shared fixtures, and compatibility helpers.

Async tests are marked with ``@pytest.mark.asyncio``. Some environments run
the suite without ``pytest-asyncio`` installed, which would otherwise make
those tests fail at collection/runtime.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from typing import Any

import pytest

from config.settings import Settings

# Variables Settings reads; cleared so the host environment never leaks in.
_SETTINGS_ENV = (
    "APP_ENV",
    "PORT",
    "CORS_ALLOWED_ORIGINS",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "GITHUB_CLIENT_ID",
    "GITHUB_CLIENT_SECRET",
    "OAUTH_CALLBACK_BASE_URL",
    "APP_URI",
    "POST_LOGOUT_REDIRECT_URL",
    "COOKIE_STORE_KEY",
    "DATABASE_URL",
    "LOG_LEVEL",
    "LOG_JSON",
)


def pytest_configure(config: pytest.Config) -> None:
    """Register local markers used in the suite."""
    config.addinivalue_line("markers", "asyncio: mark test as asyncio-compatible")


def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run ``@pytest.mark.asyncio`` tests without external plugins.

    If pytest-asyncio (or another async plugin) is installed, this hook may be
    bypassed by that plugin depending on hook ordering. In plugin-less
    environments, this fallback executes coroutine tests on a fresh loop.
    """
    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    kwargs: dict[str, Any] = {
        arg: pyfuncitem.funcargs[arg]
        for arg in pyfuncitem._fixtureinfo.argnames
    }
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        loop.run_until_complete(test_func(**kwargs))
    finally:
        loop.close()
        asyncio.set_event_loop(None)
    return True


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def make_settings() -> Callable[..., Settings]:
    """Build Settings from keyword overrides, ignoring any .env file."""

    def _make(**overrides: Any) -> Settings:
        return Settings(_env_file=None, **overrides)

    return _make
