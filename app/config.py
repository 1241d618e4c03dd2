# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key (used for auth calls)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret; when empty, HS256 tokens are rejected"
    )

    # -------------------------------------------------------------------------
    # Assistant / LLM Configuration
    # -------------------------------------------------------------------------

    OPENAI_API_KEY: str = Field(
        ...,
        description="API key for the generative-text backend"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Model used by the student assistant"
    )

    ASSISTANT_TEMPERATURE: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Generation temperature for assistant replies"
    )

    ASSISTANT_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Hard timeout for a single assistant call; the request is aborted when exceeded"
    )

    # -------------------------------------------------------------------------
    # Payments (Paystack)
    # -------------------------------------------------------------------------

    PAYSTACK_SECRET_KEY: str = Field(
        default="",
        description="Paystack secret key used to initialize and verify transactions"
    )

    PAYSTACK_BASE_URL: str = Field(
        default="https://api.paystack.co",
        description="Paystack REST API base URL"
    )

    PAYMENT_CURRENCY: str = Field(
        default="NGN",
        description="Currency code sent to the payment gateway"
    )

    PAYMENT_CALLBACK_URL: str = Field(
        default="http://localhost:3000/donor-dashboard",
        description="Where the checkout page redirects the donor after payment"
    )

    PAYMENT_TIMEOUT_SECONDS: float = Field(
        default=15.0,
        gt=0,
        description="HTTP timeout for payment gateway calls"
    )

    # -------------------------------------------------------------------------
    # Database Webhooks
    # -------------------------------------------------------------------------

    WEBHOOK_SECRET: str = Field(
        default="",
        description="Shared secret the auth webhook sends in X-Webhook-Secret; required outside development"
    )

    # -------------------------------------------------------------------------
    # Funding Rules
    # -------------------------------------------------------------------------

    MEAL_REQUEST_LEAD_HOURS: int = Field(
        default=24,
        ge=1,
        description="A new meal request is requested for now + this many hours"
    )

    BALANCE_UPDATE_MAX_RETRIES: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Compare-and-set attempts when topping up a donor balance"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
