"""Unit conversions and text helpers for activity notifications."""

from __future__ import annotations

import re

METERS_TO_MILES = 0.000621371
METERS_TO_FEET = 3.28084
MPS_TO_MPH = 2.23694

_UPPER = re.compile(r"[A-Z]")


def meters_to_miles(meters: float) -> str:
    return f"{meters * METERS_TO_MILES:.2f}"


def meters_to_feet(meters: float) -> str:
    return f"{meters * METERS_TO_FEET:.2f}"


def mps_to_mph(meters_per_second: float) -> str:
    return f"{meters_per_second * MPS_TO_MPH:.2f}"


def format_duration(seconds: float) -> str:
    """Render seconds as ``H:MM:SS``; hours are not capped at 24."""
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def humanize_camel_case(value: str) -> str:
    """``"MountainBikeRide"`` -> ``"mountain bike ride"``."""
    return _UPPER.sub(lambda match: f" {match.group(0).lower()}", value).strip()


def format_number(value: float) -> str:
    """Drop a trailing ``.0`` so whole readings print like ``152``."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


__all__ = [
    "format_duration",
    "format_number",
    "humanize_camel_case",
    "meters_to_feet",
    "meters_to_miles",
    "mps_to_mph",
]
