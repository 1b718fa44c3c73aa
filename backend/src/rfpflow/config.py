"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Mailbox ingestion is optional: when IMAP_USER or IMAP_PASSWORD is missing
    the mailbox watcher stays disabled.

    Environment Variables:
        DATABASE_URL: SQLAlchemy connection string
        LLM_PROVIDER: 'openai' or 'anthropic'
        LLM_MODEL: Model name (provider default when unset)
        OPENAI_API_KEY / ANTHROPIC_API_KEY: Provider credentials
        IMAP_USER, IMAP_PASSWORD, IMAP_HOST, IMAP_PORT: Inbound mailbox
        IMAP_POLL_INTERVAL_SECONDS: Watcher tick interval (default 300)
        INGEST_MAX_WORKERS: Concurrent per-message workers (default 8)
        SMTP_*: Outbound mail credentials
        LOG_LEVEL: Logging level (default INFO)
        LOG_JSON: Emit JSON log lines (default True)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./rfpflow.db"

    # AI Providers
    LLM_PROVIDER: str = "openai"
    LLM_MODEL: Optional[str] = None
    OPENAI_API_KEY: Optional[str] = None
    ANTHROPIC_API_KEY: Optional[str] = None
    LLM_TIMEOUT_SECONDS: float = 60.0
    EXTRACTION_TEMPERATURE: float = 0.3
    COMPARISON_TEMPERATURE: float = 0.5

    # Inbound mailbox (IMAP)
    IMAP_USER: Optional[str] = None
    IMAP_PASSWORD: Optional[str] = None
    IMAP_HOST: Optional[str] = None
    IMAP_PORT: int = 993
    IMAP_MAILBOX: str = "INBOX"
    IMAP_POLL_INTERVAL_SECONDS: float = 300.0
    INGEST_MAX_WORKERS: int = 8

    # Outbound mail (SMTP)
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM: Optional[str] = None

    # Application
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @property
    def imap_enabled(self) -> bool:
        """True when mailbox credentials are configured."""
        return bool(self.IMAP_USER and self.IMAP_PASSWORD)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
