"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

The HMAC key used to hash token secrets is read from TOKEN_HMAC_KEY; when it
is not set, SECRET_KEY is used instead (handled in AppSettings via
model_validator). Rotating the effective key invalidates every issued token.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.credentials import is_valid_component


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Without it the app runs on the in-memory token store
    mongodb_uri: Optional[str] = None
    db_name: str = "access-tokens"
    # Requires a replica set; wraps revoke-all in a multi-document transaction
    mongodb_transactions: bool = False


class TokenSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    token_hmac_key: str = ""
    token_id_prefix: str = "tok_"
    token_id_bytes: int = Field(default=16, ge=12)
    token_secret_bytes: int = Field(default=32, ge=32)

    # 0 writes last_used_at on every successful authentication
    token_last_used_update_interval_seconds: int = Field(default=60, ge=0)
    # None disables the unused-token policy
    token_unused_lifetime_seconds: Optional[int] = Field(default=None, gt=0)
    # 0 means no per-owner limit
    token_max_per_owner: int = Field(default=0, ge=0)

    @field_validator("token_id_prefix")
    @classmethod
    def _prefix_is_url_safe(cls, value: str) -> str:
        # The prefix becomes part of the credential id, which parses as [A-Za-z0-9_-]+
        if value and not is_valid_component(value):
            raise ValueError("TOKEN_ID_PREFIX may only contain A-Z, a-z, 0-9, '_' and '-'")
        return value


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production

    # Sampling rates (0.0–1.0)
    sample_rate_token_auth: float = 0.05
    sample_rate_health: float = 0.01


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    secret_key: str = ""
    env: str = "development"
    app_name: str = "access-tokens"

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    tokens: Optional[TokenSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs_and_hmac_key(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.tokens is None:
            self.tokens = TokenSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        # Fall back to SECRET_KEY for hashing token secrets
        if not self.tokens.token_hmac_key and self.secret_key:
            self.tokens.token_hmac_key = self.secret_key

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
