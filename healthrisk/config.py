"""
Configuration Management for the Health Risk Engine

Environment-based configuration using Pydantic Settings.
"""
from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra fields from .env file
    )

    # Application
    app_name: str = "Public Health Risk Engine"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = "INFO"

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_prefix: str = "/api/v1"
    cors_origins: List[str] = ["*"]

    # LLM Configuration
    gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API key")
    advisor_model: str = "gemini-2.5-pro"       # Full clinical dossier
    root_cause_model: str = "gemini-2.5-flash"  # One-sentence base reason
    advisor_temperature: float = 0.7
    llm_timeout_seconds: int = 30
    use_mock_llm: bool = Field(default=False, description="Force mock LLM responses")

    # Notification relay (Formspree-compatible form endpoint)
    notification_endpoint: Optional[str] = Field(default=None, description="Form relay URL for doctor alerts")
    notification_timeout_seconds: float = 10.0
    portal_base_url: str = "https://phre-health.org/messages"

    # History
    history_default_limit: int = 50


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
