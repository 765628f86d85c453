"""Application configuration loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Console settings loaded from the environment and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = "AudioShake Alignment Demo"
    debug: bool = False

    # ============================================================
    # Logging
    # ============================================================
    service_name: str = "alignment-demo"
    log_level: str | None = None
    log_level_noisy_libs: str = "WARNING"
    log_level_info_libs: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000
    origins: list[str] = [
        "http://localhost",
        "http://localhost:8000",
        "http://localhost:5173",
    ]

    # Local secret store for the provider API key
    database_url: str = "sqlite+aiosqlite:///./alignment_demo.db"
    credential_key_name: str = "apiKey"

    # AudioShake tasks API
    audioshake_base_url: AnyHttpUrl = AnyHttpUrl("https://api.audioshake.ai")
    audioshake_timeout: float = 30.0
    default_language: str = "en"
    default_formats: list[str] = Field(default_factory=lambda: ["json"])

    poll_max_attempts: int = Field(default=60, ge=1)
    poll_interval_seconds: float = Field(default=4.0, ge=0.0)

    alignments_take: int = 100
    diagnostics_limit: int = 500

    @property
    def base_url(self) -> str:
        """Provider base URL without the trailing slash pydantic adds."""
        return str(self.audioshake_base_url).rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()
