"""Handlers for the ``/link`` and ``/unlink`` slash commands."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from kudosbot.clients.credential_store import AccountNotLinkedError, CredentialStore
from kudosbot.clients.strava_auth import StravaOAuthClient
from kudosbot.models.account import LinkedAccount
from kudosbot.schemas.discord import (
    EPHEMERAL_FLAG,
    InteractionResponseType,
    link_button_row,
)
from kudosbot.services.link_tokens import LinkTokenBroker
from kudosbot.services.strava_tokens import StravaTokenService

logger = logging.getLogger(__name__)

UNLINK_FAILED = "Unable to unlink Strava."


def ephemeral_reply(
    content: str, components: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    data: Dict[str, Any] = {"content": content, "flags": EPHEMERAL_FLAG}
    if components:
        data["components"] = components
    return {"type": int(InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE), "data": data}


class CommandHandler:
    """Answer slash commands invoked in the relay channel."""

    def __init__(
        self,
        *,
        channel_id: str,
        broker: LinkTokenBroker,
        oauth_client: StravaOAuthClient,
        token_service: StravaTokenService,
        store: CredentialStore,
    ) -> None:
        self._channel_id = channel_id
        self._broker = broker
        self._oauth = oauth_client
        self._tokens = token_service
        self._store = store

    async def handle(
        self, *, name: str, chat_user_id: str, channel_id: Optional[str]
    ) -> Dict[str, Any]:
        if channel_id != self._channel_id:
            return ephemeral_reply(f"Please use this command in <#{self._channel_id}>")

        if name == "link":
            return self.link(chat_user_id)
        if name == "unlink":
            return await self.unlink(chat_user_id)
        return ephemeral_reply("Unknown command.")

    def link(self, chat_user_id: str) -> Dict[str, Any]:
        token = self._broker.mint(chat_user_id)
        url = self._oauth.build_authorization_url(state=token)
        return ephemeral_reply("Link Strava", [link_button_row("Link Strava", url)])

    async def unlink(self, chat_user_id: str) -> Dict[str, Any]:
        try:
            athlete_id = self._store.find_athlete_id(chat_user_id)
        except AccountNotLinkedError:
            logger.info("Unlink requested by %s with no linked account", chat_user_id)
            return ephemeral_reply(UNLINK_FAILED)

        try:
            await self._tokens.deauthorize(athlete_id)
        except Exception:
            logger.exception("Deauthorization call failed for athlete %s", athlete_id)
            return ephemeral_reply(UNLINK_FAILED)
        finally:
            self._store.upsert(athlete_id, LinkedAccount())

        logger.info("Unlinked athlete %s from chat user %s", athlete_id, chat_user_id)
        return ephemeral_reply("Unlinked Strava")


__all__ = ["CommandHandler", "ephemeral_reply"]
