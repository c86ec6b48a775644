"""HTTP server wrapper — binds the app to ``:<PORT>`` with fixed timeouts."""

from __future__ import annotations

from dataclasses import dataclass, field

import uvicorn
from starlette.types import ASGIApp

from config.settings import Settings, get_settings
from src.api.main import create_app
from src.api.middleware import DeadlineMiddleware
from src.core.constants import (
    SERVER_HOST,
    SERVER_IDLE_TIMEOUT_SECONDS,
    SERVER_READ_TIMEOUT_SECONDS,
    SERVER_WRITE_TIMEOUT_SECONDS,
)
from src.core.interfaces import DatabaseService
from src.core.logging import get_logger, setup_logging

log = get_logger(__name__)


@dataclass(frozen=True)
class ServerTimeouts:
    idle: float = SERVER_IDLE_TIMEOUT_SECONDS
    read: float = SERVER_READ_TIMEOUT_SECONDS
    write: float = SERVER_WRITE_TIMEOUT_SECONDS


@dataclass
class Server:
    port: int
    handler: ASGIApp
    timeouts: ServerTimeouts = field(default_factory=ServerTimeouts)
    host: str = SERVER_HOST

    @property
    def addr(self) -> str:
        return f":{self.port}"

    def config(self) -> uvicorn.Config:
        return uvicorn.Config(
            self.handler,
            host=self.host,
            port=self.port,
            timeout_keep_alive=int(self.timeouts.idle),
            log_config=None,
        )

    def run(self) -> None:
        log.info("server_listening", addr=self.addr)
        uvicorn.Server(self.config()).run()


def new_server(settings: Settings | None = None, db: DatabaseService | None = None) -> Server:
    """Build the app and wrap it with request deadlines."""
    if settings is None:
        settings = get_settings()
    timeouts = ServerTimeouts()
    app = create_app(settings, db=db)
    handler = DeadlineMiddleware(app, read_timeout=timeouts.read, write_timeout=timeouts.write)
    return Server(port=settings.bound_port, handler=handler, timeouts=timeouts)


def main() -> None:
    """Console entry point: ``gatehouse-serve``."""
    settings = get_settings()
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    new_server(settings).run()


if __name__ == "__main__":
    main()
