"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from kudosbot.clients import (
    CredentialStore,
    DiscordClient,
    InteractionVerifier,
    StravaOAuthClient,
    build_credential_store,
)
from kudosbot.core.config import get_settings
from kudosbot.services import (
    ActivityNotifier,
    CommandHandler,
    LinkTokenBroker,
    StravaTokenService,
)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_credential_store() -> CredentialStore:
    """Provide the process-wide credential store, loaded once."""
    settings = _settings()
    return build_credential_store(settings.storage.backend, settings.storage.resolved_path)


@lru_cache()
def get_link_token_broker() -> LinkTokenBroker:
    """Provide the in-memory link token broker."""
    settings = _settings()
    return LinkTokenBroker(
        ttl_seconds=settings.link_tokens.ttl_seconds,
        capacity=settings.link_tokens.capacity,
    )


@lru_cache()
def get_strava_oauth_client() -> StravaOAuthClient:
    """Create a singleton Strava OAuth client."""
    settings = _settings()
    return StravaOAuthClient(settings.strava, settings.redirect_uri)


@lru_cache()
def get_discord_client() -> DiscordClient:
    """Provide Discord REST client instance."""
    return DiscordClient(_settings().discord)


@lru_cache()
def get_interaction_verifier() -> InteractionVerifier:
    """Provide the Ed25519 verifier for Discord interactions."""
    return InteractionVerifier(_settings().discord.public_key)


def get_strava_token_service() -> StravaTokenService:
    """Build the token lifecycle service over the shared store."""
    return StravaTokenService(
        store=get_credential_store(),
        oauth_client=get_strava_oauth_client(),
    )


def get_activity_notifier() -> ActivityNotifier:
    """Build the activity enrichment pipeline."""
    return ActivityNotifier(
        token_service=get_strava_token_service(),
        store=get_credential_store(),
        discord_client=get_discord_client(),
    )


def get_command_handler() -> CommandHandler:
    """Build the slash command handler."""
    return CommandHandler(
        channel_id=_settings().discord.channel_id,
        broker=get_link_token_broker(),
        oauth_client=get_strava_oauth_client(),
        token_service=get_strava_token_service(),
        store=get_credential_store(),
    )


__all__ = [
    "get_activity_notifier",
    "get_command_handler",
    "get_credential_store",
    "get_discord_client",
    "get_interaction_verifier",
    "get_link_token_broker",
    "get_strava_oauth_client",
    "get_strava_token_service",
]
