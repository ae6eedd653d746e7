"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. Secrets stay out of source code: the .env file is gitignored and
.env.example provides a safe template for developers.

Pydantic Settings resolves each field in this order:
  1. Environment variables (highest priority)
  2. Values from the .env file
  3. Defaults defined here (lowest priority)

Usage:
    from bank_portal.config import settings
    print(settings.SECRET_KEY)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the Bank Portal API.

    Required fields (no defaults) MUST be set in .env or environment:
      - SECRET_KEY: Used to sign JWT tokens
      - CARD_ENCRYPTION_KEY: Fernet key for encrypting card and SSN data at rest
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Bank Portal API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # --- Bank identity ---
    BANK_NAME: str = "Bank Portal"
    ROUTING_NUMBER: str = "011075150"

    # --- Database ---
    # SQLite for local use; swap to a PostgreSQL (asyncpg) URL for production
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/bank.db"

    # --- Authentication ---
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60

    # --- Encryption at rest ---
    # Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    CARD_ENCRYPTION_KEY: str

    # --- Transfer pricing ---
    # Fee applies only above the threshold; tax applies to every transfer.
    TRANSFER_FEE_THRESHOLD_CENTS: int = 100_000
    TRANSFER_FEE_RATE: float = 0.001
    TRANSFER_TAX_RATE: float = 0.001

    # --- Email (Resend HTTP API) ---
    # Empty key means emails are logged and recorded as "not_configured".
    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com"
    EMAIL_FROM: str = "Bank Portal <no-reply@bankportal.example>"
    EMAIL_TIMEOUT_SECONDS: float = 10.0
    FRONTEND_URL: str = "http://localhost:3000"

    # --- Rate limiting ---
    RATE_LIMIT_ENABLED: bool = True

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # "console" or "json"

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
