"""Unit tests for health check routes."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException
from httpx import AsyncClient

from core.database import PoolStatus
from routes.health_routes import health, health_detailed, ready


@pytest.mark.unit
class TestHealthEndpoint:
    """Tests for GET /health."""

    async def test_health_returns_healthy(self):
        result = await health()

        assert result.status == "healthy"
        assert result.service == "laundry-admin-api"


@pytest.mark.unit
class TestDetailedHealthEndpoint:
    """Tests for GET /health/detailed."""

    async def test_reports_pool_when_available(self):
        request = MagicMock()

        with patch(
            "routes.health_routes.comprehensive_health_check",
            autospec=True,
            return_value={"database": True, "pool": PoolStatus(5, 1, 0, 4)},
        ):
            result = await health_detailed(request)

        assert result.status == "healthy"
        assert result.database is True
        assert result.pool is not None
        assert result.pool.checked_out == 1

    async def test_unhealthy_when_database_down(self):
        request = MagicMock()

        with patch(
            "routes.health_routes.comprehensive_health_check",
            autospec=True,
            return_value={"database": False, "pool": None},
        ):
            result = await health_detailed(request)

        assert result.status == "unhealthy"
        assert result.pool is None


@pytest.mark.unit
class TestReadyEndpoint:
    """Tests for GET /ready."""

    async def test_ready_when_initialized_and_db_reachable(self):
        request = MagicMock()
        request.app.state.init_error = None
        request.app.state.init_done = True

        with patch(
            "routes.health_routes.check_db_connection",
            autospec=True,
        ) as mock_check:
            result = await ready(request)

        assert result.status == "ready"
        mock_check.assert_awaited_once_with(request.app.state.engine)

    async def test_503_when_init_error(self):
        request = MagicMock()
        request.app.state.init_error = "migrations failed"
        request.app.state.init_done = False

        with pytest.raises(HTTPException) as exc_info:
            await ready(request)

        assert exc_info.value.status_code == 503
        assert "Initialization failed" in exc_info.value.detail

    async def test_503_while_starting(self):
        request = MagicMock()
        request.app.state.init_error = None
        request.app.state.init_done = False

        with pytest.raises(HTTPException) as exc_info:
            await ready(request)

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail == "Starting"

    async def test_503_when_db_check_fails(self):
        request = MagicMock()
        request.app.state.init_error = None
        request.app.state.init_done = True

        with patch(
            "routes.health_routes.check_db_connection",
            autospec=True,
            side_effect=ConnectionError("connection refused"),
        ):
            with pytest.raises(HTTPException) as exc_info:
                await ready(request)

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail == "Database unavailable"


@pytest.mark.integration
class TestHealthOverHttp:
    async def test_ready_through_app(self, client: AsyncClient):
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {"status": "ready", "service": "laundry-admin-api"}

    async def test_security_headers_present(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "x-request-id" in response.headers
