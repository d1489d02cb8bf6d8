"""Configuration management using Pydantic Settings."""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Workspace client settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="PWS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API configuration
    api_base_url: str = Field("http://localhost:3001", description="Base URL of the marketplace API")
    api_token: Optional[str] = Field(None, description="Bearer token sent with every request")

    # Request handling
    request_timeout: float = Field(30.0, gt=0)
    max_retries: int = Field(3, ge=1, le=10)
    retry_max_wait: float = Field(10.0, gt=0)

    # Uploads
    max_upload_size_bytes: int = Field(10 * 1024 * 1024, gt=0)

    # Local state
    preserve_expansion_on_load: bool = Field(
        True,
        description="Keep user-chosen section expansion across a full reload",
    )

    # Logging
    log_level: str = Field("INFO")
    log_format: str = Field("json", pattern="^(json|text)$")

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


# Instantiate global settings
settings = Settings()
