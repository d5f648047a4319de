from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production", "test"] = "local"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "Asia/Kolkata"
    STORE_NAME: str = "Build Bharat Mart"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Auth
    # Placeholder keeps local/test runs from failing when no secret is set.
    SUPABASE_JWT_SECRET: str = "test-jwt-secret"

    # Collaborators
    COMMUNICATIONS_SERVICE_URL: str = "http://communications-service:8004"
    REDIS_URL: str = "redis://localhost:6379/0"

    # Loyalty
    # Which checkout figure BBM Bucks are awarded on: "order_total" (tax and
    # shipping included, after discounts) or "subtotal" (cart value before
    # any discount).
    LOYALTY_AWARD_BASE: Literal["order_total", "subtotal"] = "subtotal"
    LOYALTY_EXPIRY_WARNING_DAYS: int = 30

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
