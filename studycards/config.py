"""
Study Cards Backend - Configuration and Settings
Centralized configuration management using Pydantic Settings
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables

    Service credentials are optional so the app always boots; handlers
    report missing credentials per request.
    """

    # Supabase Configuration
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None

    # Groq Configuration (OpenAI-compatible API)
    groq_api_key: Optional[str] = None
    groq_base_url: str = "https://api.groq.com/openai/v1"

    # AI Settings
    flashcard_model: str = "llama-3.1-8b-instant"
    flashcard_temperature: float = 0.3

    # Generation limits
    free_plan_limit: int = 100
    min_cards: int = 3
    max_cards: int = 50
    default_cards: int = 12
    history_limit: int = 50

    # Application Settings
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def has_groq(self) -> bool:
        return bool(self.groq_api_key)

    @property
    def has_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Dependency to get settings"""
    return settings
