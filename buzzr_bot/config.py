"""Configuration loading for Buzzr."""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .sessions import SESSION_TIMEOUT_SECONDS, SWEEP_INTERVAL_SECONDS


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (and `.env`).
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", case_sensitive=False, extra="ignore")

    # Discord
    discord_bot_token: str = Field(..., alias="DISCORD_BOT_TOKEN")
    bot_client_id: str = Field(..., alias="BOT_CLIENT_ID")
    guild_id: Optional[int] = Field(
        default=None,
        alias="GUILD_ID",
        description="Register slash commands for this guild only (instant) instead of globally",
    )

    # Twilio
    twilio_account_sid: str = Field(..., alias="TWILIO_ACCOUNT_SID")
    twilio_auth_token: str = Field(..., alias="TWILIO_AUTH_TOKEN")
    twilio_phone_number: str = Field(..., alias="TWILIO_PHONE_NUMBER")

    database_url: str = Field(default="sqlite+aiosqlite:///./sms_announcements.db", alias="DATABASE_URL")

    signup_session_timeout_seconds: int = Field(
        default=SESSION_TIMEOUT_SECONDS,
        alias="SIGNUP_SESSION_TIMEOUT_SECONDS",
        description="How long a /sms-signup session waits for a phone number",
    )
    signup_sweep_interval_seconds: int = Field(
        default=SWEEP_INTERVAL_SECONDS,
        alias="SIGNUP_SWEEP_INTERVAL_SECONDS",
        description="Seconds between sweeps of abandoned signup sessions",
    )
    relay_summary_delete_after_seconds: float = Field(
        default=10.0,
        alias="RELAY_SUMMARY_DELETE_AFTER_SECONDS",
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("guild_id", mode="before")
    @classmethod
    def parse_guild_id(cls, v):
        """Treat an empty GUILD_ID as unset."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @field_validator("twilio_phone_number", "discord_bot_token", "twilio_account_sid", "twilio_auth_token")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @property
    def session_timeout_minutes(self) -> int:
        return max(1, self.signup_session_timeout_seconds // 60)
