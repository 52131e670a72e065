"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).
Sub-configs are composed onto AppSettings by a model validator so that every
group reads from the same env/dotenv source.
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "link-tracker"


class JWTSettings(BaseSettings):
    """Verification settings for tokens issued by the account service."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_issuer: str = "link-tracker"
    jwt_audience: str = "link-tracker.api"
    jwt_leeway_seconds: int = 30

    # RS256 public key (preferred)
    jwt_public_key: str = ""

    # HS256 fallback (used when no public key is configured)
    jwt_secret: str = ""

    @property
    def use_rs256(self) -> bool:
        return bool(self.jwt_public_key)

    @property
    def algorithm(self) -> str:
        return "RS256" if self.use_rs256 else "HS256"

    @property
    def verification_key(self) -> str:
        if self.use_rs256:
            # Keys provided via env may carry literal \n sequences
            return self.jwt_public_key.replace("\\n", "\n")
        return self.jwt_secret


class RecorderSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    recorder_queue_size: int = 1000
    recorder_write_timeout_seconds: float = 2.0
    recorder_workers: int = 1
    recorder_shutdown_timeout_seconds: float = 5.0


class AnalyticsSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    analytics_default_window_days: int = 30
    analytics_max_window_days: int = 180
    analytics_default_top_n: int = 10
    analytics_max_top_n: int = 50
    analytics_overview_top_links: int = 5
    analytics_recent_events: int = 50


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production

    # Sampling rates (0.0–1.0)
    sample_rate_redirect: float = 0.05
    sample_rate_analytics: float = 0.20


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "link-tracker"

    # Display-only base for short links; resolution never depends on it
    short_domain: str = "http://localhost:8000"

    # Fixed destination for unknown or inactive slugs
    error_redirect_path: str = "/error"

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    jwt: Optional[JWTSettings] = None
    recorder: Optional[RecorderSettings] = None
    analytics: Optional[AnalyticsSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.recorder is None:
            self.recorder = RecorderSettings()
        if self.analytics is None:
            self.analytics = AnalyticsSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    def short_url(self, slug: str) -> str:
        return f"{self.short_domain.rstrip('/')}/{slug}"
