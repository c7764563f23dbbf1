"""Public schema exports."""

from .discord import Embed, EmbedField, Interaction, InteractionType
from .strava import StravaActivity, StravaAthlete, StravaTokenPayload, StravaWebhookEvent

__all__ = [
    "Embed",
    "EmbedField",
    "Interaction",
    "InteractionType",
    "StravaActivity",
    "StravaAthlete",
    "StravaTokenPayload",
    "StravaWebhookEvent",
]
