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


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Back-office Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/backoffice_ledger"
    )

    # Persistence backend: "live" talks to DATABASE_URL,
    # "sandbox" keeps everything in-process (optionally mirrored
    # to SANDBOX_PATH as JSON).
    LEDGER_MODE: str = os.getenv("LEDGER_MODE", "live").lower()
    SANDBOX_PATH: str | None = os.getenv("SANDBOX_PATH") or None

    # createdBy for writes issued without an identified actor
    DEFAULT_ACTOR_ID: str = os.getenv("DEFAULT_ACTOR_ID", "system")

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    @property
    def is_sandbox(self) -> bool:
        return self.LEDGER_MODE == "sandbox"


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
