"""Configuration for the chat client using pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent  # src/webhook_chat/ → project root


class Settings(BaseSettings):
    """All client settings, loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ------------------------------------------------------------------
    # Remote endpoint
    # VITE_WEBHOOK_URL is accepted so existing web deployments keep working.
    # ------------------------------------------------------------------
    webhook_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("webhook_url", "WEBHOOK_URL", "VITE_WEBHOOK_URL"),
    )
    request_timeout_seconds: float = 30.0
    expected_origin: str | None = None

    # ------------------------------------------------------------------
    # Identity capture
    # ------------------------------------------------------------------
    verify_national_id_checksum: bool = False

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    locale: Literal["pt-BR", "en"] = "pt-BR"
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("webhook_url", "expected_origin", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value


@lru_cache
def get_settings() -> Settings:
    """Return the cached Settings singleton."""
    return Settings()
