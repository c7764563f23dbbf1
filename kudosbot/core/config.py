"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app and the maintenance
scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal, Optional

import os

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class StravaSettings(BaseSettings):
    """Configuration required for the Strava OAuth flow and webhooks."""

    client_id: str = Field(..., validation_alias="STRAVA_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="STRAVA_CLIENT_SECRET")
    verify_token: str = Field(
        ...,
        validation_alias="STRAVA_VERIFY_TOKEN",
        description="Shared secret echoed back by Strava during subscription.",
    )
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("activity:read", "profile:read_all", "read"),
        validation_alias="STRAVA_SCOPES",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())


class DiscordSettings(BaseSettings):
    """Settings for the Discord application and its single relay channel."""

    bot_token: str = Field(..., validation_alias="DISCORD_BOT_TOKEN")
    application_id: str = Field(..., validation_alias="DISCORD_APPLICATION_ID")
    public_key: str = Field(
        ...,
        validation_alias="DISCORD_PUBLIC_KEY",
        description="Hex encoded Ed25519 key used to verify interactions.",
    )
    channel_id: str = Field(..., validation_alias="DISCORD_CHANNEL_ID")
    register_commands: bool = Field(False, validation_alias="DISCORD_REGISTER_COMMANDS")


class StorageSettings(BaseSettings):
    """Where linked account credentials are persisted."""

    backend: Literal["json", "sqlite"] = Field(
        "json", validation_alias="CREDENTIAL_STORE_BACKEND"
    )
    path: Optional[str] = Field(
        None,
        validation_alias="CREDENTIAL_STORE_PATH",
        description="Defaults to config.json (json) or credentials.db (sqlite).",
    )

    @property
    def resolved_path(self) -> str:
        if self.path:
            return self.path
        return "credentials.db" if self.backend == "sqlite" else "config.json"


class LinkTokenSettings(BaseSettings):
    """Bounds for outstanding one-time link tokens."""

    ttl_seconds: int = Field(900, ge=1, validation_alias="LINK_TOKEN_TTL_SECONDS")
    capacity: int = Field(1024, ge=1, validation_alias="LINK_TOKEN_CAPACITY")


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    url_base: AnyHttpUrl = Field(
        ...,
        validation_alias="URL_BASE",
        description="Public base URL; the OAuth redirect is <URL_BASE>/callback.",
    )
    strava: StravaSettings = Field(default_factory=StravaSettings)
    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    link_tokens: LinkTokenSettings = Field(default_factory=LinkTokenSettings)

    @property
    def redirect_uri(self) -> str:
        return f"{str(self.url_base).rstrip('/')}/callback"


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "DiscordSettings",
    "LinkTokenSettings",
    "StorageSettings",
    "StravaSettings",
    "get_settings",
]
