"""Sanity-check the relay's ``.env`` before (re)starting it.

Loading the settings only proves the variables are present. This tool also
catches values that load fine but break the relay at runtime:

* a Discord public key that is not an Ed25519 key (every interaction 401s),
* Discord or Strava ids that are not numeric,
* a ``URL_BASE`` carrying a path, query or fragment, which Strava rejects as
  a redirect URI,
* a credential store location the process cannot write to.

Example usage::

    python -m scripts.check_env --env-file /srv/kudosbot/.env
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List

from pydantic import ValidationError

from kudosbot.clients.discord import InteractionVerifier
from kudosbot.core.config import AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_RUNTIME_ERROR = 5


def _load_settings(env_file: Path) -> AppSettings:
    _load_env_file(str(env_file))
    return AppSettings(_env_file=env_file)  # type: ignore[call-arg]


def _check_public_key(settings: AppSettings) -> List[str]:
    try:
        InteractionVerifier(settings.discord.public_key)
    except ValueError as exc:
        return [f"DISCORD_PUBLIC_KEY: {exc}"]
    return []


def _check_numeric_ids(settings: AppSettings) -> List[str]:
    ids = {
        "STRAVA_CLIENT_ID": settings.strava.client_id,
        "DISCORD_APPLICATION_ID": settings.discord.application_id,
        "DISCORD_CHANNEL_ID": settings.discord.channel_id,
    }
    return [
        f"{name} must be numeric, got {value!r}"
        for name, value in ids.items()
        if not value.isdigit()
    ]


def _check_url_base(settings: AppSettings) -> List[str]:
    url = settings.url_base
    problems = []
    if url.path not in (None, "", "/"):
        problems.append(f"URL_BASE must not carry a path ({url.path!r})")
    if url.query or url.fragment:
        problems.append("URL_BASE must not carry a query string or fragment")
    if url.scheme != "https" and url.host not in ("localhost", "127.0.0.1"):
        problems.append("URL_BASE should use https; Strava redirects to it from a browser")
    return problems


def _check_store_path(settings: AppSettings) -> List[str]:
    path = Path(settings.storage.resolved_path)
    if path.exists():
        if not os.access(path, os.W_OK):
            return [f"Credential store {path} is not writable"]
        return []
    # The stores create missing directories; check the nearest one that exists.
    parent = path.parent
    while not parent.exists() and parent != parent.parent:
        parent = parent.parent
    if not os.access(parent, os.W_OK):
        return [f"Cannot create credential store {path}: {parent} is not writable"]
    return []


CHECKS = (_check_public_key, _check_numeric_ids, _check_url_base, _check_store_path)


def collect_problems(settings: AppSettings) -> List[str]:
    """Run every check and return the problems found, in check order."""
    problems: List[str] = []
    for check in CHECKS:
        problems.extend(check(settings))
    return problems


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate the kudosbot environment before starting the server."
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Path to the environment file (default: .env in the repo root).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(f"Environment file {env_file} does not exist.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        settings = _load_settings(env_file)
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    problems = collect_problems(settings)
    if problems:
        for problem in problems:
            print(f"- {problem}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    print(f"Strava redirect URI: {settings.redirect_uri}")
    print(f"Credential store: {settings.storage.backend} at {settings.storage.resolved_path}")
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
