"""
Logging utilities for the FastAPI application and maintenance scripts.

Provides a consistent logging format and configuration.
"""

import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )


def redact_token(token: str | None, keep: int = 4) -> str:
    """Return a log-safe representation of a bearer or refresh token."""
    if not token:
        return "<none>"
    return f"{token[:keep]}…"


__all__ = ["configure_logging", "redact_token"]
