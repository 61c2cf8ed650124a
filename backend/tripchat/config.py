"""
TripChat Backend Configuration
Environment variables and settings management
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./tripchat.db"

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # LLM Configuration (OpenAI or any OpenAI-compatible provider)
    llm_api_key: Optional[str] = None
    llm_model: str = "gpt-4"
    llm_base_url: Optional[str] = None
    llm_temperature: float = 0.8
    llm_timeout_seconds: float = 60.0

    # Conversation Settings
    history_window: int = 10  # Most recent turns sent to the model
    catalog_limit: int = 10  # Attractions listed in the prompt / used as fallback
    draft_route_limit: int = 6
    default_city: str = "Сочи"
    default_days: int = 3
    max_trip_days: int = 30

    # Links
    share_base_url: str = "http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
