"""Tests for the health check route and database collaborators."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.data.db import SQLDatabaseService, StubDatabaseService, new_database_service


def _client(make_settings, db) -> TestClient:
    return TestClient(create_app(make_settings(), db=db))


class TestHealthEndpoint:
    def test_health_returns_up(self, make_settings) -> None:
        response = _client(make_settings, StubDatabaseService()).get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "up"
        assert data["message"] == "It's healthy"

    def test_body_is_collaborator_mapping(self, make_settings) -> None:
        db = MagicMock()
        db.health = AsyncMock(return_value={"status": "up", "message": "ok", "pool": "idle=2"})

        response = _client(make_settings, db).get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "up", "message": "ok", "pool": "idle=2"}

    def test_down_returns_503(self, make_settings) -> None:
        db = MagicMock()
        db.health = AsyncMock(return_value={"status": "down", "error": "db down: refused"})

        response = _client(make_settings, db).get("/health")

        assert response.status_code == 503
        assert response.json() == {"status": "down", "error": "db down: refused"}

    def test_collaborator_error_returns_503(self, make_settings) -> None:
        db = MagicMock()
        db.health = AsyncMock(side_effect=RuntimeError("pool exhausted"))

        response = _client(make_settings, db).get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "down"

    def test_shutdown_closes_collaborator(self, make_settings) -> None:
        db = MagicMock()
        db.close = AsyncMock()

        with TestClient(create_app(make_settings(), db=db)):
            pass

        db.close.assert_awaited_once()


def _mock_engine() -> tuple[MagicMock, AsyncMock]:
    engine = MagicMock()
    conn = AsyncMock()
    engine.connect.return_value.__aenter__.return_value = conn
    engine.pool.status.return_value = "Pool size: 5  Connections in pool: 1"
    engine.dispose = AsyncMock()
    return engine, conn


class TestSQLDatabaseService:
    @pytest.mark.asyncio
    async def test_up(self) -> None:
        engine, conn = _mock_engine()
        report = await SQLDatabaseService(engine).health()

        assert report["status"] == "up"
        assert report["message"] == "It's healthy"
        assert report["pool"].startswith("Pool size")
        conn.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_down_on_error(self) -> None:
        engine, conn = _mock_engine()
        conn.execute.side_effect = OSError("connection refused")

        report = await SQLDatabaseService(engine).health()

        assert report["status"] == "down"
        assert "connection refused" in report["error"]

    @pytest.mark.asyncio
    async def test_down_on_timeout(self) -> None:
        engine, conn = _mock_engine()

        async def _hang(*args: object, **kwargs: object) -> None:
            await asyncio.sleep(1)

        conn.execute.side_effect = _hang

        report = await SQLDatabaseService(engine, ping_timeout=0.01).health()

        assert report["status"] == "down"
        assert "timed out" in report["error"]

    @pytest.mark.asyncio
    async def test_close_disposes_engine(self) -> None:
        engine, _ = _mock_engine()
        await SQLDatabaseService(engine).close()
        engine.dispose.assert_awaited_once()


class TestStubDatabaseService:
    @pytest.mark.asyncio
    async def test_health(self) -> None:
        assert await StubDatabaseService().health() == {"status": "up", "message": "It's healthy"}

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        assert await StubDatabaseService().close() is None


class TestNewDatabaseService:
    def test_stub_without_url(self, make_settings) -> None:
        assert isinstance(new_database_service(make_settings()), StubDatabaseService)

    def test_sql_probe_with_url(self, make_settings) -> None:
        settings = make_settings(database_url="postgresql+asyncpg://app:app@db:5432/app")
        with patch("src.data.db.create_async_engine", return_value=MagicMock()) as create:
            service = new_database_service(settings)

        assert isinstance(service, SQLDatabaseService)
        create.assert_called_once()
