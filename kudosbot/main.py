"""
FastAPI application entrypoint for the Strava to Discord relay.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from kudosbot.api.routes import router as api_router
from kudosbot.clients.discord import DiscordAPIError
from kudosbot.core.config import get_settings
from kudosbot.core.logging import configure_logging
from kudosbot.dependencies import get_credential_store, get_discord_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    get_credential_store()
    discord_client = get_discord_client()
    if settings.discord.register_commands:
        try:
            await discord_client.register_commands()
        except (DiscordAPIError, httpx.HTTPError) as exc:
            logger.error("Slash command registration failed: %s", exc)
    logger.info("Server ready; add the bot with %s", discord_client.install_url())
    yield


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="kudosbot",
        version="0.1.0",
        description="Relays Strava activities into a Discord channel.",
        lifespan=lifespan,
    )
    app.include_router(api_router)
    return app


app = create_app()

__all__ = ["app", "create_app"]
