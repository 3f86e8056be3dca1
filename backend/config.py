# backend/config.py
from functools import lru_cache
from pathlib import Path
from typing import ClassVar, List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"


class Settings(BaseSettings):
    # Token signing key; JWT_SECRET is accepted for older deployments
    SECRET_KEY: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SECRET_KEY", "JWT_SECRET")
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    DATABASE_URL: str = "sqlite:///./bookstore.db"
    UPLOAD_DIR: str = "uploads"

    FRONTEND_URL: Optional[str] = None
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Process-wide configuration, built once and shared read-only."""
    return Settings()
