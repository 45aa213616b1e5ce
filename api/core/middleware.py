"""ASGI middleware: security headers and canonical request logging."""

from __future__ import annotations

import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.logger import get_logger
from core.wide_event import clear_wide_event, get_wide_event, init_wide_event

logger = get_logger("request")

# Requests slower than this are always logged at WARNING
SLOW_REQUEST_THRESHOLD_MS = 1000


class SecurityHeadersMiddleware:
    """Adds security headers to every JSON response."""

    SECURITY_HEADERS: list[tuple[bytes, bytes]] = [
        (b"x-content-type-options", b"nosniff"),
        (b"x-frame-options", b"DENY"),
        (b"referrer-policy", b"strict-origin-when-cross-origin"),
        (b"cache-control", b"no-store"),
        (b"strict-transport-security", b"max-age=31536000; includeSubDomains"),
    ]

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                headers: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers.extend(self.SECURITY_HEADERS)
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_wrapper)


class RequestLoggingMiddleware:
    """Emits one ``request.completed`` line per request.

    Initializes the wide event so routes, services and repositories can
    attach fields, then logs it together with status and duration once the
    response body has been sent.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        request_id = str(uuid.uuid4())
        client = scope.get("client")

        wide_event = init_wide_event()
        wide_event["request_id"] = request_id
        wide_event["http_method"] = scope.get("method", "UNKNOWN")
        wide_event["http_path"] = scope.get("path", "")
        wide_event["http_client_ip"] = client[0] if client else "unknown"

        response_status: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal response_status

            if message.get("type") == "http.response.start":
                response_status = int(message.get("status", 0))
                headers: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                headers.append((b"x-request-id", request_id.encode()))
                message["headers"] = headers

            elif message.get("type") == "http.response.body" and not message.get(
                "more_body", False
            ):
                _emit(scope, response_status, start_time)

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            _emit(scope, 500, start_time)
            raise
        finally:
            clear_wide_event()


def _emit(scope: Scope, status: int | None, start_time: float) -> None:
    event = get_wide_event()
    if not event or event.get("_emitted"):
        return
    event["_emitted"] = True

    duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
    route = scope.get("route")
    fields = {k: v for k, v in event.items() if not k.startswith("_")}
    fields["http_route"] = getattr(route, "path", None) or fields.get("http_path")
    fields["http_status"] = status
    fields["duration_ms"] = duration_ms

    if status is not None and status >= 500:
        logger.error("request.completed", **fields)
    elif duration_ms > SLOW_REQUEST_THRESHOLD_MS:
        logger.warning("request.completed", **fields)
    else:
        logger.info("request.completed", **fields)
