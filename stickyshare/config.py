"""
StickyShare Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before app starts.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Production deployments MUST override GATEWAY_URL and GATEWAY_API_KEY.
    Attributes are grouped by concern.
    """

    # ── Storage Gateway ───────────────────────────────────────────────────
    # Base URL of the hosted record + blob service, e.g. https://xyz.supabase.co
    gateway_url: str = Field(
        default="http://localhost:54321",
        description="Base URL of the hosted storage gateway",
    )

    # Sent as both `apikey` and `Authorization: Bearer` on every gateway call
    gateway_api_key: str = Field(
        default="",
        description="API key for the storage gateway",
    )

    notes_table: str = Field(default="notes")
    images_bucket: str = Field(default="note-images")

    # None means requests wait indefinitely
    gateway_timeout_seconds: Optional[float] = Field(default=None, gt=0)

    # ── Images ────────────────────────────────────────────────────────────
    # Default: 5MB = 5 * 1024 * 1024 = 5242880; a file of exactly this size passes
    max_image_size: int = Field(default=5_242_880, ge=1)

    # ── Share Links ───────────────────────────────────────────────────────
    # Origin used for share links; empty means "derive from the request"
    public_origin: str = Field(default="")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated URLs
    cors_origins: str = Field(default="http://localhost:8000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

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

    @field_validator("gateway_url", "public_origin")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises a single ValueError.
        """
        errors = []
        if not self.gateway_url:
            errors.append("GATEWAY_URL is not set.")
        if not self.gateway_api_key:
            errors.append(
                "GATEWAY_API_KEY is not set. "
                "Use the anon/public key of your hosted storage project."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
