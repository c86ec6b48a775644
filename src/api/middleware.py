"""HTTP middleware — structured request logging and request read/write deadlines."""

from __future__ import annotations

import asyncio
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from src.core.constants import SERVER_READ_TIMEOUT_SECONDS, SERVER_WRITE_TIMEOUT_SECONDS
from src.core.logging import get_logger

log = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request: method, path, status, and latency."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        client = request.client.host if request.client else None
        try:
            response = await call_next(request)
        except Exception:
            log.exception(
                "request_failed",
                method=request.method,
                path=request.url.path,
                client=client,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        log.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            client=client,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return response


class ReadTimeoutError(Exception):
    """Client did not finish sending the request body in time."""


class DeadlineMiddleware:
    """Bound how long a request may take to arrive and to be answered.

    ``read_timeout`` covers receiving the whole request body; ``write_timeout``
    covers producing the whole response. When a deadline passes before the
    response has started, the client gets 408 (read) or 503 (write) in place of
    whatever the app answered; after that the error propagates and the server
    drops the connection.
    """

    def __init__(
        self,
        app: ASGIApp,
        read_timeout: float = SERVER_READ_TIMEOUT_SECONDS,
        write_timeout: float = SERVER_WRITE_TIMEOUT_SECONDS,
    ) -> None:
        self.app = app
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        loop = asyncio.get_running_loop()
        read_deadline = loop.time() + self.read_timeout
        body_complete = False
        read_timed_out = False
        response_started = False

        async def receive_with_deadline() -> Message:
            nonlocal body_complete, read_timed_out
            if body_complete:
                return await receive()
            remaining = read_deadline - loop.time()
            try:
                message = await asyncio.wait_for(receive(), timeout=max(remaining, 0))
            except asyncio.TimeoutError as exc:
                read_timed_out = True
                raise ReadTimeoutError(f"request body not received within {self.read_timeout}s") from exc
            if message["type"] != "http.request" or not message.get("more_body", False):
                body_complete = True
            return message

        async def send_tracking(message: Message) -> None:
            nonlocal response_started
            # After a read timeout the 408 below replaces the app's answer.
            if read_timed_out and not response_started:
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await asyncio.wait_for(
                self.app(scope, receive_with_deadline, send_tracking),
                timeout=self.write_timeout,
            )
        except asyncio.TimeoutError:
            log.warning("request_write_timeout", path=scope.get("path"), timeout=self.write_timeout)
            if response_started:
                raise
            await PlainTextResponse("Service Unavailable", status_code=503)(scope, receive, send)
            return
        except Exception:
            # ServerErrorMiddleware re-raises after its 500, which send_tracking dropped.
            if not read_timed_out or response_started:
                raise

        if read_timed_out and not response_started:
            log.warning("request_read_timeout", path=scope.get("path"), timeout=self.read_timeout)
            await PlainTextResponse("Request Timeout", status_code=408)(scope, receive, send)
