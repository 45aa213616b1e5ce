"""Unit tests for core.config.

Tests cover:
- Settings model_validator checks
- is_sqlite and allowed_origins properties
- get_settings / clear_settings_cache lru_cache behavior
"""

import pytest
from pydantic import ValidationError

from core.config import Settings, clear_settings_cache, get_settings


@pytest.fixture(autouse=True)
def _clear_settings():
    """Clear lru_cache between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.mark.unit
class TestSettingsValidation:
    def test_debug_mode_allows_default_secret(self):
        settings = Settings(
            jwt_secret="dev-jwt-secret-change-in-production", debug=True
        )

        assert settings.debug is True

    def test_production_rejects_default_secret(self):
        with pytest.raises(ValidationError, match="JWT_SECRET"):
            Settings(jwt_secret="dev-jwt-secret-change-in-production", debug=False)

    def test_requires_database_url(self):
        with pytest.raises(ValidationError, match="DATABASE_URL"):
            Settings(database_url="", debug=True)

    def test_rejects_zero_hour_tokens(self):
        with pytest.raises(ValidationError, match="ACCESS_TOKEN_EXPIRE_HOURS"):
            Settings(access_token_expire_hours=0, debug=True)


@pytest.mark.unit
class TestSettingsProperties:
    def test_is_sqlite(self):
        assert Settings(database_url="sqlite+aiosqlite:///x.db", debug=True).is_sqlite
        assert not Settings(
            database_url="postgresql+asyncpg://localhost/db", debug=True
        ).is_sqlite

    def test_allowed_origins_deduplicates(self):
        settings = Settings(
            debug=True,
            frontend_url="http://localhost:3000",
            cors_allowed_origins="https://admin.example.com, http://localhost:3000",
        )

        assert settings.allowed_origins == [
            "http://localhost:3000",
            "https://admin.example.com",
        ]


@pytest.mark.unit
class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_cache_clear_builds_new_instance(self):
        first = get_settings()
        clear_settings_cache()

        assert get_settings() is not first
