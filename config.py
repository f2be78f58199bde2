"""
Configuration management using Pydantic Settings.
Validates all environment variables at startup for fail-fast behavior.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Application settings with validation."""

    # Email settings (Resend)
    RESEND_API_KEY: Optional[str] = Field(
        default=None,
        description="Resend API key for report and newsletter emails"
    )
    EMAIL_FROM: Optional[str] = Field(
        default=None,
        description="Sender address for all outgoing email"
    )
    EMAIL_FROM_NAME: str = Field(
        default="AI Maverick",
        description="Display name used in the From header and email signature"
    )
    NOTIFY_EMAIL_TO: Optional[str] = Field(
        default=None,
        description="Admin inbox for new-lead notifications (defaults to EMAIL_FROM)"
    )
    RESEND_TIMEOUT: int = Field(
        default=20,
        ge=5,
        le=60,
        description="Resend API timeout in seconds (5-60, default: 20)"
    )

    # Report attachment
    REPORT_PDF_PATH: Optional[str] = Field(
        default="public/resources/Strategic-AI-Clarity-Report.pdf",
        description="PDF attached to the readiness report email (unset to send without attachment)"
    )
    REPORT_PDF_FILENAME: str = Field(
        default="Strategic-AI-Clarity-Report.pdf",
        description="Attachment filename shown to the recipient"
    )

    # Database settings
    DATABASE_URL: Optional[str] = Field(
        default=None,
        description="PostgreSQL connection string (optional)"
    )
    DB_POOL_MIN: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Minimum database pool connections"
    )
    DB_POOL_MAX: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum database pool connections"
    )

    # Scoring
    SCORING_TABLE_PATH: Optional[str] = Field(
        default=None,
        description="JSON scoring table overriding the built-in one"
    )

    # Rate limiting for public form endpoints
    RATE_LIMIT_MAX_REQUESTS: int = Field(
        default=5,
        ge=1,
        description="Submissions allowed per client per window"
    )
    RATE_LIMIT_WINDOW_SECONDS: int = Field(
        default=15 * 60,
        ge=1,
        description="Rate limit window length in seconds"
    )
    TRUSTED_PROXY_HOPS: int = Field(
        default=0,
        ge=0,
        le=10,
        description="Reverse proxies in front of the app; X-Forwarded-For is ignored when 0"
    )

    # Frontend settings
    FRONTEND_ORIGIN: str = Field(
        default="*",
        description="Comma-separated CORS origins, or '*' for any"
    )
    STATIC_DIR: Optional[str] = Field(
        default=None,
        description="Directory of the landing page to serve at / (optional)"
    )

    # Server
    PORT: int = Field(default=3000, ge=1, le=65535)

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v_upper

    @field_validator("DB_POOL_MAX")
    @classmethod
    def validate_pool_max_gte_min(cls, v: int, info) -> int:
        """Ensure max pool size >= min pool size."""
        if "DB_POOL_MIN" in info.data and v < info.data["DB_POOL_MIN"]:
            raise ValueError("DB_POOL_MAX must be >= DB_POOL_MIN")
        return v

    @property
    def email_enabled(self) -> bool:
        """Check if outgoing email is configured."""
        return bool(self.RESEND_API_KEY and self.EMAIL_FROM)

    @property
    def admin_email(self) -> Optional[str]:
        return self.NOTIFY_EMAIL_TO or self.EMAIL_FROM

    @property
    def database_enabled(self) -> bool:
        """Check if database is configured."""
        return bool(self.DATABASE_URL)

    @property
    def cors_origins(self) -> List[str]:
        origins = [o.strip() for o in self.FRONTEND_ORIGIN.split(",") if o.strip()]
        return origins or ["*"]


# Global settings instance
settings = Settings()
