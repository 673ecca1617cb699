"""Library configuration via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """PayLens settings loaded from PAYLENS_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PAYLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Transport defaults
    default_timeout: float = 30.0  # seconds
    default_retries: int = 3

    # Peach Payments
    peach_entity_id: Optional[str] = None
    peach_username: Optional[str] = None
    peach_password: Optional[str] = None
    peach_environment: Optional[Literal["sandbox", "production"]] = None
    # Legacy Peach settings, superseded by peach_environment
    peach_api_url: Optional[str] = None
    peach_sandbox: Optional[bool] = None

    def peach_payments_config(self) -> dict[str, Any] | None:
        """Peach gateway config built from settings, or None if not configured."""
        if not (self.peach_entity_id and self.peach_username and self.peach_password):
            return None

        config: dict[str, Any] = {
            "entity_id": self.peach_entity_id,
            "username": self.peach_username,
            "password": self.peach_password,
            "timeout": self.default_timeout,
            "retries": self.default_retries,
        }
        if self.peach_environment:
            config["environment"] = self.peach_environment
        if self.peach_api_url:
            config["api_url"] = self.peach_api_url
        if self.peach_sandbox is not None:
            config["sandbox"] = self.peach_sandbox
        return config


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
