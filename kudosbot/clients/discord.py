"""Discord REST client and interaction signature verification."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

import httpx
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from kudosbot.core.config import DiscordSettings
from kudosbot.schemas.discord import Embed

logger = logging.getLogger(__name__)

DISCORD_API_BASE = "https://discord.com/api/v10"

SLASH_COMMANDS: List[Dict[str, str]] = [
    {"name": "link", "description": "Link your Strava!"},
    {"name": "unlink", "description": "Unlink your Strava!"},
]


class DiscordAPIError(Exception):
    """Raised when the Discord REST API rejects a request."""


class InvalidSignatureError(Exception):
    """Raised when an interaction request fails Ed25519 verification."""


class InteractionVerifier:
    """Verify ``X-Signature-Ed25519`` headers on incoming interactions."""

    def __init__(self, public_key_hex: str) -> None:
        try:
            self._key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key_hex))
        except ValueError as exc:
            raise ValueError("Discord public key must be 32 hex-encoded bytes.") from exc

    def verify(self, *, signature: str | None, timestamp: str | None, body: bytes) -> None:
        if not signature or not timestamp:
            raise InvalidSignatureError("Missing signature headers.")
        try:
            self._key.verify(bytes.fromhex(signature), timestamp.encode("utf-8") + body)
        except (InvalidSignature, ValueError) as exc:
            raise InvalidSignatureError("Interaction signature mismatch.") from exc


class DiscordClient:
    """Thin wrapper over the Discord REST endpoints used by the relay."""

    def __init__(
        self,
        discord_settings: DiscordSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._discord = discord_settings
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=DISCORD_API_BASE,
            timeout=10.0,
            transport=self._transport,
            headers={"Authorization": f"Bot {self._discord.bot_token}"},
        )

    @property
    def channel_id(self) -> str:
        return self._discord.channel_id

    def install_url(self) -> str:
        """URL for adding the bot to a server with command scope."""
        return (
            "https://discord.com/api/oauth2/authorize"
            f"?client_id={self._discord.application_id}"
            "&scope=bot%20applications.commands&permissions=2147486720"
        )

    async def send_channel_message(
        self,
        *,
        embeds: Sequence[Embed],
        components: Sequence[Dict[str, Any]] = (),
        channel_id: str | None = None,
    ) -> Dict[str, Any]:
        """Post a message to the relay channel (or an explicit one)."""
        target = channel_id or self._discord.channel_id
        body: Dict[str, Any] = {"embeds": [embed.to_payload() for embed in embeds]}
        if components:
            body["components"] = list(components)

        async with self._client() as client:
            response = await client.post(f"/channels/{target}/messages", json=body)

        if response.is_error:
            raise DiscordAPIError(
                f"Discord rejected message for channel {target}: "
                f"{response.status_code} {response.text}"
            )
        return response.json()

    async def register_commands(self) -> List[Dict[str, Any]]:
        """Overwrite the application's global slash commands."""
        async with self._client() as client:
            response = await client.put(
                f"/applications/{self._discord.application_id}/commands",
                json=SLASH_COMMANDS,
            )

        if response.is_error:
            raise DiscordAPIError(
                f"Discord rejected command registration: {response.status_code} {response.text}"
            )
        logger.info("Registered %d slash commands", len(SLASH_COMMANDS))
        return response.json()


__all__ = [
    "DiscordAPIError",
    "DiscordClient",
    "InteractionVerifier",
    "InvalidSignatureError",
    "SLASH_COMMANDS",
]
