"""
Rentals Application Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "Rentals API"
    PROJECT_DESCRIPTION: str = "Property rental listings backed by Supabase"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # ==================== Supabase ====================
    # Both are required to reach the store; missing values degrade to an error state
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    PROPERTIES_TABLE: str = "properties"
    AGENTS_TABLE: str = "agents"

    # Agent assigned to new listings when the caller names none
    DEFAULT_AGENT_ID: int = 1

    # ==================== CORS & Frontend ====================
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # ==================== Server Configuration ====================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = False

    # ==================== Features ====================
    DEBUG: bool = False

    # ==================== Logging ====================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "standard"  # standard | json

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",  # Allow extra environment variables
    )

    # ==================== Properties ====================
    def missing_store_settings(self) -> List[str]:
        """Names of the Supabase connection parameters that are not set"""
        missing = []
        if not self.SUPABASE_URL.strip():
            missing.append("SUPABASE_URL")
        if not self.SUPABASE_KEY.strip():
            missing.append("SUPABASE_KEY")
        return missing

    @property
    def store_configured(self) -> bool:
        """Check if the Supabase connection parameters are present"""
        return not self.missing_store_settings()


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
