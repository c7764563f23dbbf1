"""Service layer exports."""

from .activity_notifier import ActivityNotifier
from .commands import CommandHandler
from .link_tokens import LinkTokenBroker, LinkTokenInvalidError
from .strava_tokens import (
    AuthOutcome,
    AuthorizedResponse,
    LinkResult,
    StravaTokenService,
    StravaUnauthorizedError,
)

__all__ = [
    "ActivityNotifier",
    "AuthOutcome",
    "AuthorizedResponse",
    "CommandHandler",
    "LinkResult",
    "LinkTokenBroker",
    "LinkTokenInvalidError",
    "StravaTokenService",
    "StravaUnauthorizedError",
]
