"""Application configuration using pydantic-settings pattern."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "PT Scheduler Patient Matching"
    app_version: str = "0.1.0"
    log_level: str = Field(default="INFO")

    # Anthropic (LLM behind the match-patient disambiguation endpoint)
    anthropic_api_key: str | None = Field(default=None)
    anthropic_model: str = Field(default="claude-sonnet-4-5")

    # Remote semantic fallback (stage 3)
    remote_match_url: str = Field(
        default="http://localhost:8000/api/match-patient",
        description="Endpoint of the name disambiguation service",
    )
    remote_match_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Ceiling for the single outbound disambiguation request",
    )

    # Matching calibration
    fuzzy_distance_threshold: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Maximum fuzzy distance (0-1) for a candidate to be kept",
    )
    auto_accept_threshold: int = Field(default=90, ge=1, le=100)
    confirm_threshold: int = Field(default=70, ge=1, le=100)
    alias_table_path: str | None = Field(
        default=None,
        description="Optional JSON file mapping formal names to nickname lists",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
