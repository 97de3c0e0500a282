"""
botengine/config.py — Central configuration loaded from environment variables.
All modules import settings from here; never read os.environ directly elsewhere.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Runtime ───────────────────────────────────────────────────────────────
    environment: str = Field(default="development", description="development | staging | production")
    log_level: str = Field(default="INFO", description="Root log level for the API process")
    app_version: str = Field(default="1.0.0")

    # ── Database ──────────────────────────────────────────────────────────────
    database_url: str = Field(
        default="sqlite:///./bot_engine.db",
        description="SQLAlchemy connection URI (usage log, lead ledger, chat sessions)",
    )

    # ── LLM ──────────────────────────────────────────────────────────────────
    openrouter_api_key: str = Field(default="", description="OpenRouter API key")
    openrouter_model: str = Field(
        default="openrouter/trinity-large-preview:free",
        description="OpenRouter model identifier",
    )

    # ── Tenants ───────────────────────────────────────────────────────────────
    clients_file: str = Field(
        default="clients.json",
        description="JSON file describing every tenant (API key, quota, sheet, location)",
    )

    # ── Google Sheets ─────────────────────────────────────────────────────────
    google_service_account_file: str = Field(
        default="service_account.json",
        description="Service-account credentials used for every tenant spreadsheet",
    )
    sheets_dry_run: bool = Field(
        default=True,
        description="If True, log lead rows instead of writing them to Google Sheets",
    )

    # ── Geocoding ─────────────────────────────────────────────────────────────
    geocoding_enabled: bool = Field(
        default=False,
        description="If True, pincode checks also report whether the pincode is inside the tenant radius",
    )
    nominatim_url: str = Field(default="https://nominatim.openstreetmap.org/search")

    # ── HTTP ──────────────────────────────────────────────────────────────────
    cors_origins: list[str] = Field(
        default_factory=list,
        description="Extra allowed origins on top of every tenant domain",
    )
    rate_limit_enabled: bool = Field(default=True)
    global_rate_limit: str = Field(
        default="200 per 15 minutes",
        description="Per-IP limit applied to every route except health checks",
    )
    quota_window_minutes: int = Field(
        default=60,
        gt=0,
        description="Window over which a tenant's max_requests quota is counted",
    )

    # ── Quotes ────────────────────────────────────────────────────────────────
    quote_validity_days: int = Field(default=30, gt=0)
    fallback_quote: str = Field(
        default="₹15,00,000 - ₹25,00,000",
        description="Range shown to the end user when pricing fails internally",
    )
    support_contact: str = Field(default="support@bot-engine.com")


# Singleton — import this everywhere
settings = Settings()
