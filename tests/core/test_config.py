"""Tests for application configuration."""
import pytest
from pydantic import ValidationError

from core.config import Settings


class TestCorsOriginsParsing:
    """Tests for CORS origins parsing from environment variables."""

    def test_parse_multiple_origins_comma_separated(self) -> None:
        """Multiple comma-separated origins are parsed correctly."""
        settings = Settings(
            _env_file=None,
            database_url="postgresql://test",
            CORS_ORIGINS="http://localhost:3000, https://example.com,",
        )
        assert settings.cors_origins == ["http://localhost:3000", "https://example.com"]

    def test_default_cors_origins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Default CORS origin is the local web client."""
        monkeypatch.delenv("CORS_ORIGINS", raising=False)
        settings = Settings(_env_file=None, database_url="postgresql://test")
        assert settings.cors_origins == ["http://localhost:3000"]


class TestUploadConfig:
    """Tests for upload limits and content types."""

    def test_default_upload_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Defaults allow the four image types up to 50MB."""
        monkeypatch.delenv("ALLOWED_UPLOAD_TYPES", raising=False)
        monkeypatch.delenv("MAX_UPLOAD_BYTES", raising=False)
        settings = Settings(_env_file=None, database_url="postgresql://test")

        assert settings.allowed_upload_types == frozenset(
            {"image/jpeg", "image/png", "image/gif", "image/webp"},
        )
        assert settings.max_upload_bytes == 50 * 1024 * 1024

    def test_allowed_upload_types_are_lowercased(self) -> None:
        """Configured content types are compared case-insensitively."""
        settings = Settings(
            _env_file=None,
            database_url="postgresql://test",
            ALLOWED_UPLOAD_TYPES="Image/PNG, image/svg+xml",
        )
        assert settings.allowed_upload_types == frozenset({"image/png", "image/svg+xml"})


class TestAuth0Config:
    """Tests for derived Auth0 URLs."""

    def test_issuer_and_jwks_url(self) -> None:
        """Issuer and JWKS URL are built from the domain."""
        settings = Settings(
            _env_file=None,
            database_url="postgresql://test",
            AUTH0_DOMAIN="tenant.auth0.com",
        )
        assert settings.auth0_issuer == "https://tenant.auth0.com/"
        assert settings.auth0_jwks_url == "https://tenant.auth0.com/.well-known/jwks.json"


class TestDevModeSecurity:
    """DEV_MODE must never run against a remote database."""

    @pytest.mark.parametrize(
        "database_url",
        [
            "postgresql+asyncpg://user:pw@localhost:5432/prompts",
            "postgresql+asyncpg://user:pw@127.0.0.1/prompts",
            "sqlite+aiosqlite:///./local.db",
        ],
    )
    def test_dev_mode_allowed_for_local_databases(self, database_url: str) -> None:
        """Local hosts and SQLite files are accepted."""
        settings = Settings(_env_file=None, database_url=database_url, DEV_MODE="true")
        assert settings.dev_mode is True

    def test_dev_mode_rejected_for_remote_database(self) -> None:
        """A remote host with DEV_MODE fails validation."""
        with pytest.raises(ValidationError, match="DEV_MODE cannot be enabled"):
            Settings(
                _env_file=None,
                database_url="postgresql+asyncpg://user:pw@db.example.com/prompts",
                DEV_MODE="true",
            )
