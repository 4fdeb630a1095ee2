# src/shared/middleware.py
from __future__ import annotations

import time
import uuid

from fastapi import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from src.shared.logging import bind_context, clear_context, get_logger

logger = get_logger("http")


class CorrelationIdMiddleware:
    """
    Ensures every request has a correlation id.
    - Reads from X-Correlation-ID if provided, otherwise generates one.
    - Exposes request.state.correlation_id and binds it to the log context.
    - Echoes X-Correlation-ID in response headers.
    """
    def __init__(self, app: ASGIApp, header_name: str = "X-Correlation-ID"):
        self.app = app
        self.header_name = header_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        corr = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.correlation_id = corr
        bind_context(correlation_id=corr)

        async def send_wrapper(message):
            if message.get("type") == "http.response.start":
                headers = list(message.get("headers") or [])
                headers.append((self.header_name.encode(), corr.encode()))
                message["headers"] = headers
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            clear_context()


class RequestLoggingMiddleware:
    """
    Lightweight request timing + structured logging.
    Logs method, path, status and duration_ms once the response starts.
    """
    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()

        async def send_wrapper(message):
            if message.get("type") == "http.response.start":
                status = message.get("status")
                duration_ms = int((time.perf_counter() - start) * 1000)
                log = logger.warning if status >= 500 else logger.info
                log(
                    "http_request",
                    method=scope.get("method"),
                    path=scope.get("path"),
                    status=status,
                    duration_ms=duration_ms,
                )
            await send(message)

        await self.app(scope, receive, send_wrapper)
