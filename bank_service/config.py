"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Bank Service"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = _env_flag("DEBUG", "false")

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./bank_service.db"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_JSON: bool = _env_flag("LOG_JSON", "false")

    # Security
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Accounts
    # Fixed branch prefix of every account number
    BANK_BRANCH_CODE: str = os.getenv("BANK_BRANCH_CODE", "4070281050000")
    # When true, deactivated accounts disappear from id lookups and listings
    HIDE_DEACTIVATED_ACCOUNTS: bool = _env_flag(
        "HIDE_DEACTIVATED_ACCOUNTS", "false"
    )
    # When false, hard delete refuses accounts that still hold money
    ALLOW_DELETE_WITH_BALANCE: bool = _env_flag(
        "ALLOW_DELETE_WITH_BALANCE", "true"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
