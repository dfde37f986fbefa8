"""
Application Configuration — Environment & Settings
Centralizes all config from .env with Pydantic Settings for validation.
"""
from pathlib import Path
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings

# Resolve paths relative to backend/ directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # --- Core ---
    APP_NAME: str = "CareerNest Payments API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # --- Database ---
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'data' / 'careernest.db'}"

    # --- HTTP ---
    CORS_ORIGINS: list[str] = ["*"]

    # --- Payments ---
    SETTLEMENT_CURRENCY: str = "ZAR"
    STATUS_POLL_INTERVAL_SECONDS: int = 3
    STATUS_POLL_MAX_ATTEMPTS: int = 40
    PAYMENT_REQUEST_RATE_LIMIT: int = 10
    PAYMENT_REQUEST_RATE_WINDOW: int = 60
    SEED_AI_SERVICES: bool = True

    # --- MTN MoMo Collections ---
    MOMO_MODE: Literal["mock", "sandbox", "live"] = "mock"
    MOMO_BASE_URL: str = "https://sandbox.momodeveloper.mtn.com"
    MOMO_TARGET_ENV: str = "sandbox"
    MOMO_COLLECTIONS_SUBSCRIPTION_KEY: str = ""
    MOMO_COLLECTIONS_USER_ID: str = ""
    MOMO_COLLECTIONS_API_KEY: str = ""
    MOMO_CALLBACK_URL: str = ""
    MOMO_CALLBACK_TOKEN: str = ""
    MOMO_HTTP_TIMEOUT_S: float = 20.0

    # --- Logging ---
    LOG_DIR: str = str(BASE_DIR / "logs")

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
