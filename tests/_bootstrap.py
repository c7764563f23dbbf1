"""Test helper that normalizes sys.path and environment defaults."""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# RFC 8032 test vector 1; any well-formed key works for module import.
TEST_PUBLIC_KEY = "d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a"

_DEFAULT_ENV_VARS: dict[str, str] = {
    "STRAVA_CLIENT_ID": "12345",
    "STRAVA_CLIENT_SECRET": "test-client-secret",
    "STRAVA_VERIFY_TOKEN": "test-verify-token",
    "URL_BASE": "https://relay.example.com",
    "DISCORD_BOT_TOKEN": "test-bot-token",
    "DISCORD_APPLICATION_ID": "999000999",
    "DISCORD_PUBLIC_KEY": TEST_PUBLIC_KEY,
    "DISCORD_CHANNEL_ID": "424242",
    "CREDENTIAL_STORE_PATH": str(Path(tempfile.gettempdir()) / "kudosbot-test-config.json"),
}

for key, value in _DEFAULT_ENV_VARS.items():
    os.environ.setdefault(key, value)
