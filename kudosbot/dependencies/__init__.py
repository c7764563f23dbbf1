"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_activity_notifier,
    get_command_handler,
    get_credential_store,
    get_discord_client,
    get_interaction_verifier,
    get_link_token_broker,
    get_strava_oauth_client,
    get_strava_token_service,
)
from .config import SettingsDependency, get_app_settings

__all__ = [
    "SettingsDependency",
    "get_activity_notifier",
    "get_app_settings",
    "get_command_handler",
    "get_credential_store",
    "get_discord_client",
    "get_interaction_verifier",
    "get_link_token_broker",
    "get_strava_oauth_client",
    "get_strava_token_service",
]
