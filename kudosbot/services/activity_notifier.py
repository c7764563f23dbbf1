"""
Turn Strava activity events into Discord channel notifications.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from kudosbot.clients.credential_store import CredentialStore
from kudosbot.clients.discord import DiscordClient
from kudosbot.schemas.discord import Embed, EmbedField, link_button_row
from kudosbot.schemas.strava import StravaActivity
from kudosbot.services.formatting import (
    format_duration,
    format_number,
    humanize_camel_case,
    meters_to_feet,
    meters_to_miles,
    mps_to_mph,
)
from kudosbot.services.strava_tokens import StravaTokenService

logger = logging.getLogger(__name__)

STRAVA_GREEN = 0x63FC30
ACTIVITY_URL = "https://www.strava.com/api/v3/activities/{activity_id}"
ACTIVITY_LINK = "https://www.strava.com/activities/{activity_id}"
ATHLETE_LINK = "https://www.strava.com/athletes/{athlete_id}"
FOOTER_TEXT = "Link your Strava with /link"

# (label, attribute, formatter); a field is shown only when the value is truthy.
_ACTIVITY_FIELDS: List[tuple[str, str, Callable[[float], str]]] = [
    ("Distance", "distance", lambda v: f"{meters_to_miles(v)} mi"),
    ("Moving Time", "moving_time", format_duration),
    ("Elapsed Time", "elapsed_time", format_duration),
    ("Elevation Gain", "total_elevation_gain", lambda v: f"{meters_to_feet(v)} ft"),
    ("Average Speed", "average_speed", lambda v: f"{mps_to_mph(v)} mph"),
    ("Max Speed", "max_speed", lambda v: f"{mps_to_mph(v)} mph"),
    ("Average Heartrate", "average_heartrate", lambda v: f"{format_number(v)} bpm"),
    ("Max Heartrate", "max_heartrate", lambda v: f"{format_number(v)} bpm"),
    ("Calories", "calories", lambda v: f"{format_number(v)} kcal"),
    ("Average Watts", "average_watts", lambda v: f"{format_number(v)} W"),
    ("Normalized Power", "weighted_average_watts", lambda v: f"{format_number(v)} W"),
]


def build_activity_fields(activity: StravaActivity) -> List[EmbedField]:
    fields: List[EmbedField] = []
    for label, attribute, formatter in _ACTIVITY_FIELDS:
        value = getattr(activity, attribute)
        if value:
            fields.append(EmbedField(name=label, value=formatter(value)))
    return fields


def build_activity_embed(
    activity: StravaActivity,
    *,
    activity_id: str,
    chat_user_id: str,
    profile_image_url: Optional[str] = None,
) -> Embed:
    link = ACTIVITY_LINK.format(activity_id=activity_id)
    description = (
        f"<@{chat_user_id}> uploaded [a {humanize_camel_case(activity.sport_type)}]({link})! "
        "Give them Kudos!"
    )
    if activity.description:
        description = f"{description}\n\n{activity.description}"

    return Embed(
        title=activity.name,
        description=description,
        url=link,
        color=STRAVA_GREEN,
        timestamp=activity.start_date,
        footer=FOOTER_TEXT,
        image_url=profile_image_url,
        fields=build_activity_fields(activity),
    )


class ActivityNotifier:
    """Fetch, enrich, and deliver newly created activities."""

    def __init__(
        self,
        *,
        token_service: StravaTokenService,
        store: CredentialStore,
        discord_client: DiscordClient,
    ) -> None:
        self._tokens = token_service
        self._store = store
        self._discord = discord_client

    async def process_activity(self, athlete_id: str, activity_id: str) -> bool:
        """Relay one activity; returns False when the athlete is not linked."""
        athlete_id, activity_id = str(athlete_id), str(activity_id)
        logger.info("Processing activity %s for athlete %s", activity_id, athlete_id)

        result = await self._tokens.authorized_request(
            athlete_id,
            "GET",
            ACTIVITY_URL.format(activity_id=activity_id),
            headers={"Accept": "application/json"},
        )
        response = result.require()
        response.raise_for_status()
        activity = StravaActivity.model_validate(response.json())

        account = self._store.get(athlete_id)
        if not account.chat_user_id:
            logger.debug("Athlete %s is not linked; skipping activity %s", athlete_id, activity_id)
            return False

        embed = build_activity_embed(
            activity,
            activity_id=activity_id,
            chat_user_id=account.chat_user_id,
            profile_image_url=account.profile_image_url,
        )
        await self._discord.send_channel_message(
            embeds=[embed],
            components=[link_button_row("Strava", ACTIVITY_LINK.format(activity_id=activity_id))],
        )
        return True

    async def announce_link(self, *, athlete_id: str, chat_user_id: str) -> None:
        """Tell the channel that a Discord user linked their Strava account."""
        embed = Embed(
            title="Strava Linked",
            description=(
                f"Successfully linked <@{chat_user_id}>'s "
                f"[Strava account]({ATHLETE_LINK.format(athlete_id=athlete_id)}) 🎉"
            ),
            color=STRAVA_GREEN,
            footer=FOOTER_TEXT,
            timestamp=datetime.now(timezone.utc),
        )
        await self._discord.send_channel_message(embeds=[embed])


__all__ = [
    "ActivityNotifier",
    "build_activity_embed",
    "build_activity_fields",
]
