"""Application settings using Pydantic Settings for typed configuration.

Settings are loaded once from environment variables (and an optional .env
file) and are frozen afterwards. Services receive the Settings object at
construction instead of reading the environment themselves.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # Environment
    env_name: str = Field(default="development", alias="ENV_NAME")

    # Database
    mongodb_url: str = Field(default="mongodb://localhost:27017", alias="MONGODB_URL")
    mongodb_db: str = Field(default="cocoon", alias="MONGODB_DB")

    # Tokens
    jwt_secret: str = Field(alias="JWT_SECRET")
    refresh_token_secret: str = Field(alias="REFRESH_TOKEN_SECRET")
    access_token_minutes: int = Field(default=60, alias="ACCESS_TOKEN_MINUTES", ge=1)
    refresh_token_days: int = Field(default=7, alias="REFRESH_TOKEN_DAYS", ge=1)
    verification_token_minutes: int = Field(
        default=10, alias="VERIFICATION_TOKEN_MINUTES", ge=1
    )

    # URLs
    base_url: str = Field(default="http://localhost:8000", alias="BASE_URL")
    client_url: str = Field(default="http://localhost:3000", alias="CLIENT_URL")

    # CORS
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    # Email (Resend)
    resend_api_key: str | None = Field(default=None, alias="RESEND_API_KEY")
    app_domain: str = Field(default="resend.dev", alias="APP_DOMAIN")

    # OAuth providers
    google_client_id: str | None = Field(default=None, alias="GOOGLE_CLIENT_ID")
    google_client_secret: str | None = Field(default=None, alias="GOOGLE_CLIENT_SECRET")
    facebook_client_id: str | None = Field(default=None, alias="FACEBOOK_CLIENT_ID")
    facebook_client_secret: str | None = Field(
        default=None, alias="FACEBOOK_CLIENT_SECRET"
    )

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        origins = []
        for o in self.cors_origins.split(","):
            trimmed = o.strip()
            if trimmed:
                origins.append(trimmed)
        return origins

    @computed_field
    @property
    def access_token_expires_in(self) -> timedelta:
        return timedelta(minutes=self.access_token_minutes)

    @computed_field
    @property
    def refresh_token_expires_in(self) -> timedelta:
        return timedelta(days=self.refresh_token_days)

    @computed_field
    @property
    def verification_token_expires_in(self) -> timedelta:
        return timedelta(minutes=self.verification_token_minutes)

    def oauth_callback_url(self, provider: str) -> str:
        """Callback URL registered with the OAuth provider."""
        return f"{self.base_url.rstrip('/')}/auth/{provider}/callback"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
