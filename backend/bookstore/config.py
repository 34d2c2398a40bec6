"""
Bookstore Backend — Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before the app starts.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development. Attributes are
    grouped by concern.
    """

    # ── Service Type ──────────────────────────────────────────────────────
    # What: Identity of the service group this API belongs to.
    # The public prefix is derived from it: /{service_type_id}/api/v{service_version}
    service_type_id: str = Field(default="bookstore", pattern=r"^[a-z][a-z0-9-]*$")
    service_version: int = Field(default=1, ge=1)
    api_title: str = Field(default="Bookstore API")
    api_description: str = Field(default="API for managing books in a bookstore")

    @property
    def api_prefix(self) -> str:
        """URL prefix shared by every resource route of this service."""
        return f"/{self.service_type_id}/api/v{self.service_version}"

    # ── Pagination ────────────────────────────────────────────────────────
    # What: Page size used when a list request does not ask for one
    default_page_size: int = Field(default=20, ge=1, le=1000)

    # What: Upper bound a client may request in a single page
    max_page_size: int = Field(default=100, ge=1, le=1000)

    # ── Optimistic Concurrency ────────────────────────────────────────────
    # What: When enabled, every PATCH must carry the sync_token it was based on
    # Default off: unversioned patches are retried until they apply cleanly
    require_sync_token: bool = Field(default=False)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (split by cors_origins_list)
    cors_origins: str = Field(default="http://localhost:3000")

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

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_for_startup(self) -> None:
        """
        What:  Cross-field checks that single-field validators cannot express.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if self.default_page_size > self.max_page_size:
            errors.append(
                f"DEFAULT_PAGE_SIZE ({self.default_page_size}) exceeds "
                f"MAX_PAGE_SIZE ({self.max_page_size})"
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance — imported throughout the application
settings = Settings()
