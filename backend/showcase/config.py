"""
Response Showcase — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for a local demo run.
    Attributes are grouped by concern for readability.
    """

    # ── API Metadata ──────────────────────────────────────────────────────
    # What: Values published in the `info` block of the OpenAPI document
    app_title: str = Field(default="Response Showcase API")
    app_version: str = Field(default="1.0.0")
    app_description: str = Field(
        default="Sample API showing JSON, HTML, CSV, validated and multipart responses"
    )

    # ── Uploads ───────────────────────────────────────────────────────────
    # What: Maximum accepted size of a single uploaded file, in bytes
    # Default: 10MB = 10 * 1024 * 1024 = 10485760
    # Valid range: 1KB to 50MB
    max_upload_size: int = Field(default=10_485_760, ge=1_024, le=52_428_800)

    # What: Room for multipart framing and text parts on top of one file
    # Default: 64KB
    request_body_overhead: int = Field(default=65_536, ge=0, le=1_048_576)

    @property
    def max_body_size(self) -> int:
        """Largest request body accepted by contract routes (413 above it)."""
        return self.max_upload_size + self.request_body_overhead

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (split by cors_origins_list)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Singleton instance — imported throughout the application
settings = Settings()
