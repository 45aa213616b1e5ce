"""Unit tests for core.middleware.

Tests ASGI middleware:
- SecurityHeadersMiddleware adds security headers to HTTP responses
- SecurityHeadersMiddleware skips non-HTTP scopes
- RequestLoggingMiddleware adds x-request-id and emits one log line
"""

from unittest.mock import patch

import pytest

from core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from core.wide_event import set_wide_event_fields


async def _noop_receive():
    return {"type": "http.request", "body": b""}


async def _make_app_that_sends_response(scope, receive, send):
    """Simulate an ASGI app that sends a response."""
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"OK"})


@pytest.mark.unit
class TestSecurityHeadersMiddleware:
    async def test_adds_security_headers(self):
        middleware = SecurityHeadersMiddleware(_make_app_that_sends_response)
        scope = {"type": "http", "path": "/api/admin/orders"}
        sent_messages = []

        async def mock_send(message):
            sent_messages.append(message)

        await middleware(scope, _noop_receive, mock_send)

        headers = dict(sent_messages[0]["headers"])
        assert headers[b"x-content-type-options"] == b"nosniff"
        assert headers[b"x-frame-options"] == b"DENY"
        assert headers[b"cache-control"] == b"no-store"
        assert b"strict-transport-security" in headers

    async def test_skips_non_http_scopes(self):
        called = False

        async def inner_app(scope, receive, send):
            nonlocal called
            called = True

        middleware = SecurityHeadersMiddleware(inner_app)

        await middleware({"type": "websocket"}, _noop_receive, lambda msg: None)
        assert called


@pytest.mark.unit
class TestRequestLoggingMiddleware:
    async def test_adds_request_id_and_logs_once(self):
        async def app(scope, receive, send):
            set_wide_event_fields(laundry_id="l-1")
            await _make_app_that_sends_response(scope, receive, send)

        middleware = RequestLoggingMiddleware(app)
        scope = {"type": "http", "method": "GET", "path": "/api/admin/orders"}
        sent_messages = []

        async def mock_send(message):
            sent_messages.append(message)

        with patch("core.middleware.logger") as mock_logger:
            await middleware(scope, _noop_receive, mock_send)

        header_names = {name for name, _ in sent_messages[0]["headers"]}
        assert b"x-request-id" in header_names
        mock_logger.info.assert_called_once()
        _, fields = mock_logger.info.call_args
        assert fields["http_status"] == 200
        assert fields["laundry_id"] == "l-1"

    async def test_server_error_logs_at_error(self):
        async def app(scope, receive, send):
            await send({"type": "http.response.start", "status": 503, "headers": []})
            await send({"type": "http.response.body", "body": b""})

        middleware = RequestLoggingMiddleware(app)
        scope = {"type": "http", "method": "GET", "path": "/ready"}

        async def mock_send(message):
            pass

        with patch("core.middleware.logger") as mock_logger:
            await middleware(scope, _noop_receive, mock_send)

        mock_logger.error.assert_called_once()
        mock_logger.info.assert_not_called()
