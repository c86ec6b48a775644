"""Database collaborators — a stub for local development and an async SQL probe."""

from __future__ import annotations

import asyncio

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from config.settings import Settings
from src.core.constants import (
    DB_PING_TIMEOUT_SECONDS,
    HEALTH_MESSAGE_OK,
    HEALTH_STATUS_DOWN,
    HEALTH_STATUS_UP,
)
from src.core.interfaces import DatabaseService
from src.core.logging import get_logger

log = get_logger(__name__)


class StubDatabaseService(DatabaseService):
    """Always healthy. Used when no DATABASE_URL is configured."""

    async def health(self) -> dict[str, str]:
        return {"status": HEALTH_STATUS_UP, "message": HEALTH_MESSAGE_OK}

    async def close(self) -> None:
        return None


class SQLDatabaseService(DatabaseService):
    """Health probe over an async SQLAlchemy engine."""

    def __init__(self, engine: AsyncEngine, ping_timeout: float = DB_PING_TIMEOUT_SECONDS) -> None:
        self._engine = engine
        self._ping_timeout = ping_timeout

    async def _ping(self) -> None:
        async with self._engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def health(self) -> dict[str, str]:
        try:
            await asyncio.wait_for(self._ping(), timeout=self._ping_timeout)
        except asyncio.TimeoutError:
            log.warning("database_ping_timeout", timeout=self._ping_timeout)
            return {"status": HEALTH_STATUS_DOWN, "error": "db down: ping timed out"}
        except Exception as exc:
            log.warning("database_ping_failed", error=str(exc))
            return {"status": HEALTH_STATUS_DOWN, "error": f"db down: {exc}"}

        return {
            "status": HEALTH_STATUS_UP,
            "message": HEALTH_MESSAGE_OK,
            "pool": str(self._engine.pool.status()),
        }

    async def close(self) -> None:
        await self._engine.dispose()
        log.info("database_engine_closed")


def new_database_service(settings: Settings) -> DatabaseService:
    """SQL probe when DATABASE_URL is set, stub otherwise."""
    db_url = settings.database_url.get_secret_value()
    if not db_url:
        return StubDatabaseService()

    engine = create_async_engine(db_url, echo=False, pool_pre_ping=True)
    log.info("database_engine_created", host=db_url.split("@")[-1].split("?")[0])
    return SQLDatabaseService(engine)
