"""Expose constructed client wrappers."""

from .credential_store import (
    AccountNotLinkedError,
    CredentialStore,
    JsonCredentialStore,
    SQLiteCredentialStore,
    build_credential_store,
)
from .discord import DiscordAPIError, DiscordClient, InteractionVerifier, InvalidSignatureError
from .strava_auth import OAuthTokenExchangeError, OAuthTokenRefreshError, StravaOAuthClient

__all__ = [
    "AccountNotLinkedError",
    "CredentialStore",
    "DiscordAPIError",
    "DiscordClient",
    "InteractionVerifier",
    "InvalidSignatureError",
    "JsonCredentialStore",
    "OAuthTokenExchangeError",
    "OAuthTokenRefreshError",
    "SQLiteCredentialStore",
    "StravaOAuthClient",
    "build_credential_store",
]
