"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with defaults for development."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./studyabroad.db"

    # JWT Configuration
    jwt_secret: str = "dev-secret-change-me-in-production"
    jwt_issuer: str = "studyabroad"
    jwt_audience: str = "studyabroad-users"
    # Access tokens are the only token type the gateway accepts
    jwt_access_token_expire_minutes: int = 60

    # Comma-separated list of allowed origins (empty uses default localhost list)
    allowed_origins: str = ""

    # Server
    rest_api_port: int = 8000

    # Environment
    environment: str = "development"
    debug: bool = True

    # Logging (empty values pick a default from debug/environment)
    log_level: str = ""  # DEBUG, INFO, WARNING, ...
    log_format: str = ""  # "json" or "text"

    # WebSocket
    ws_max_message_size: int = 64 * 1024  # 64 KB
    ws_monitor_interval: int = 30  # Seconds between connection count log lines

    # Forum moderation
    forum_report_hide_threshold: int = 3  # Reports needed to auto-hide a post

    # Chat
    chat_rate_limit_seconds: int = 15  # Minimum gap between messages per user

    def validate_production_secrets(self) -> list[str]:
        """
        Validate that secrets are properly configured for production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        weak_secrets = {
            "dev-secret-change-me-in-production",
            "secret",
            "password",
            "changeme",
            "default",
        }

        if self.environment == "production":
            if self.jwt_secret in weak_secrets or len(self.jwt_secret) < 32:
                errors.append(
                    "JWT_SECRET must be at least 32 characters and not a default value in production"
                )

            if self.debug:
                errors.append("DEBUG must be False in production")

            if not self.allowed_origins:
                errors.append(
                    "ALLOWED_ORIGINS must be set in production (comma-separated list of allowed domains)"
                )

            if self.database_url.startswith("sqlite"):
                errors.append("DATABASE_URL must point to a server database in production")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()

# Direct access to commonly used settings
DATABASE_URL = settings.database_url
JWT_SECRET = settings.jwt_secret
JWT_ISSUER = settings.jwt_issuer
JWT_AUDIENCE = settings.jwt_audience
