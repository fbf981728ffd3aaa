"""Application configuration using pydantic-settings."""
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str

    # Auth0 - issuer of the caller identity
    auth0_domain: str = Field(default="", validation_alias="AUTH0_DOMAIN")
    auth0_audience: str = Field(default="", validation_alias="AUTH0_AUDIENCE")

    # Development mode - bypasses auth for local development
    dev_mode: bool = Field(default=False, validation_alias="DEV_MODE")

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Field length limits
    max_title_length: int = Field(default=500, validation_alias="MAX_TITLE_LENGTH")
    max_description_length: int = Field(
        default=2000, validation_alias="MAX_DESCRIPTION_LENGTH",
    )
    max_content_length: int = Field(default=512_000, validation_alias="MAX_CONTENT_LENGTH")

    # Object storage for uploaded cover images
    storage_root: str = Field(default="./storage", validation_alias="STORAGE_ROOT")
    storage_bucket: str = Field(default="prompt-manager", validation_alias="STORAGE_BUCKET")
    storage_public_url: str = Field(
        default="http://localhost:8000/assets",
        validation_alias="STORAGE_PUBLIC_URL",
    )
    max_upload_bytes: int = Field(
        default=50 * 1024 * 1024, validation_alias="MAX_UPLOAD_BYTES",
    )
    allowed_upload_types_str: str = Field(
        default="image/jpeg,image/png,image/gif,image/webp",
        validation_alias="ALLOWED_UPLOAD_TYPES",
    )

    @model_validator(mode="after")
    def validate_dev_mode_security(self) -> "Settings":
        """
        Prevent DEV_MODE from being enabled with a production database.

        DEV_MODE completely bypasses authentication, so we must ensure it's only
        used with local development databases to prevent accidental production exposure.
        """
        if not self.dev_mode:
            return self

        # SQLite databases are always local files
        if self.database_url.startswith("sqlite"):
            return self

        try:
            parsed = urlparse(self.database_url)
            hostname = parsed.hostname or ""
        except ValueError:
            # If we can't parse the URL, block DEV_MODE (fail-safe)
            hostname = ""

        local_hosts = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}
        if hostname.lower() not in local_hosts:
            raise ValueError(
                f"DEV_MODE cannot be enabled with a non-local database. "
                f"Database host '{hostname}' appears to be a production database. "
                f"DEV_MODE bypasses all authentication and must only be used locally.",
            )

        return self

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        return _split_csv(self.cors_origins_str)

    @property
    def allowed_upload_types(self) -> frozenset[str]:
        """Content types accepted by the upload endpoint."""
        return frozenset(value.lower() for value in _split_csv(self.allowed_upload_types_str))

    @property
    def auth0_issuer(self) -> str:
        """Get the Auth0 issuer URL."""
        return f"https://{self.auth0_domain}/"

    @property
    def auth0_jwks_url(self) -> str:
        """Get the Auth0 JWKS URL for fetching public keys."""
        return f"https://{self.auth0_domain}/.well-known/jwks.json"


def _split_csv(value: str) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
