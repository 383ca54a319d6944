"""
Configuration management for the Strategic Planning backend.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_origins(raw: str) -> List[str]:
    """
    Parse a comma-separated origin list.

    Examples:
        "http://a,http://b" -> ["http://a", "http://b"]
        "  http://a , " -> ["http://a"]
        "" -> []
    """
    if not raw or not raw.strip():
        return []

    origins = [origin.strip() for origin in raw.split(",")]
    return [o for o in origins if o]


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Application
    app_name: str = Field(default="Strategic Planning Backend")
    debug: bool = Field(default=False)
    environment: str = Field(default="development")

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_workers: int = Field(default=1)

    # Database
    database_url: str = Field(default="sqlite:///./strategic_planning.db")

    # Security
    secret_key: str = Field(default="change-me-in-production")
    token_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 24)
    min_password_length: int = Field(default=6)

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed origins.",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    # Listing
    public_list_limit: int = Field(default=10)
    max_list_limit: int = Field(default=1000)

    # Domain defaults
    default_province: str = Field(default="Yala")

    @property
    def allowed_origins(self) -> List[str]:
        return _parse_origins(self.cors_origins)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
