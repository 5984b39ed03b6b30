"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_path: str = "./data/affiscope.db"

    # Sites
    sites_dir: str = "./sites"
    default_site_id: str = "affiscope"
    # Extra host -> siteId entries on top of the domains declared in sites/*.json
    host_site_map: dict[str, str] = {}
    ga4_measurement_id: str = ""

    # LLM API Keys
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # LLM Provider selection
    llm_provider: Literal["openai", "claude"] = "openai"
    openai_model: str = "gpt-4o-mini"

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
