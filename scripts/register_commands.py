"""Register the ``/link`` and ``/unlink`` slash commands with Discord.

Usage::

    python -m scripts.register_commands
"""

from __future__ import annotations

import asyncio
import sys

import httpx

from kudosbot.clients.discord import DiscordAPIError, DiscordClient
from kudosbot.core.config import get_settings
from kudosbot.core.logging import configure_logging


async def _register() -> int:
    settings = get_settings()
    client = DiscordClient(settings.discord)
    try:
        commands = await client.register_commands()
    except (DiscordAPIError, httpx.HTTPError) as exc:
        print(f"Registration failed: {exc}", file=sys.stderr)
        return 1
    for command in commands:
        print(f"/{command['name']} ({command.get('id', '?')})")
    print(f"Install the bot with: {client.install_url()}")
    return 0


def main() -> int:
    configure_logging(get_settings().log_level)
    return asyncio.run(_register())


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
