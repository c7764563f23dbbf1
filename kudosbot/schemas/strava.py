"""Schemas for Strava OAuth, activity, and webhook payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class StravaAthlete(BaseModel):
    """Summary athlete returned alongside an authorization code exchange."""

    id: int
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    profile: Optional[str] = Field(None, description="Avatar URL.")


class StravaTokenPayload(BaseModel):
    """Token endpoint response for both code exchange and refresh grants."""

    access_token: str
    refresh_token: str
    expires_at: Optional[int] = None
    expires_in: Optional[int] = None
    athlete: Optional[StravaAthlete] = None


class StravaActivity(BaseModel):
    """The subset of a detailed activity used to compose notifications."""

    id: Optional[int] = None
    name: str = ""
    sport_type: str = ""
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    distance: Optional[float] = None
    moving_time: Optional[int] = None
    elapsed_time: Optional[int] = None
    total_elevation_gain: Optional[float] = None
    average_speed: Optional[float] = None
    max_speed: Optional[float] = None
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    calories: Optional[float] = None
    average_watts: Optional[float] = None
    weighted_average_watts: Optional[float] = None


class StravaWebhookEvent(BaseModel):
    """Push subscription event delivered to ``POST /webhook``."""

    aspect_type: str
    object_id: int
    object_type: str
    owner_id: int
    event_time: Optional[int] = None
    subscription_id: Optional[int] = None
    updates: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_activity_create(self) -> bool:
        return self.object_type == "activity" and self.aspect_type == "create"


__all__ = [
    "StravaActivity",
    "StravaAthlete",
    "StravaTokenPayload",
    "StravaWebhookEvent",
]
