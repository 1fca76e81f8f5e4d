"""
Configuration management for the account service
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Account service configuration loaded from environment variables"""

    # Token Configuration
    SECRET_KEY: str = ""
    TOKEN_TTL_HOURS: int = 24
    TOKEN_COOKIE_NAME: str = "token"
    COOKIE_SECURE: bool = False

    # Password Hashing
    PASSWORD_HASH_ROUNDS: int = 29000

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./app.db"
    DB_TIMEOUT_SECONDS: int = 5

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @property
    def token_ttl_seconds(self) -> int:
        return self.TOKEN_TTL_HOURS * 3600


# Global settings instance
settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Dependency provider for settings; overridden in tests."""
    return settings
