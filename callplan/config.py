"""
Centralized Configuration System
Environment-aware settings for the call-plan dashboard core.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow"
    )
    """
    Production-grade configuration management.
    Loads from environment variables with sensible defaults.
    """

    # ============================================
    # BACKEND SERVICE
    # ============================================
    backend_base_url: str = "http://localhost:4242"
    backend_token: Optional[str] = None
    request_timeout_seconds: float = 10.0

    # ============================================
    # BUSINESS RULES
    # ============================================
    local_timezone: str = "Australia/Sydney"
    daily_target: int = 80                     # Max cards on the board at any one time

    # ============================================
    # POLLING
    # ============================================
    poll_interval_seconds: float = 60.0
    enable_pollers: bool = True

    # ============================================
    # LOCAL STATE
    # ============================================
    agenda_state_path: str = ".callplan/agenda_state.json"

    # ============================================
    # OBSERVABILITY
    # ============================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    enable_structured_logging: bool = False  # Set to True for production JSON logs

    # ============================================
    # ENVIRONMENT
    # ============================================
    environment: Literal["development", "test", "staging", "production"] = "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Singleton pattern for settings.
    Uses LRU cache to ensure only one Settings instance exists.
    """
    return Settings()
