try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from kudosbot.services.formatting import (
    format_duration,
    format_number,
    humanize_camel_case,
    meters_to_feet,
    meters_to_miles,
    mps_to_mph,
)


def test_unit_conversions_round_to_two_decimals() -> None:
    assert meters_to_miles(1609.34) == "1.00"
    assert meters_to_feet(3048) == "10000.00"
    assert meters_to_feet(1) == "3.28"
    assert mps_to_mph(10) == "22.37"


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (3661, "1:01:01"),
        (59, "0:00:59"),
        (600, "0:10:00"),
        (90061, "25:01:01"),
    ],
)
def test_format_duration(seconds: int, expected: str) -> None:
    assert format_duration(seconds) == expected


@pytest.mark.parametrize(
    ("sport_type", "expected"),
    [
        ("Run", "run"),
        ("TrailRun", "trail run"),
        ("MountainBikeRide", "mountain bike ride"),
        ("EBikeRide", "e bike ride"),
    ],
)
def test_humanize_camel_case(sport_type: str, expected: str) -> None:
    assert humanize_camel_case(sport_type) == expected


def test_format_number_drops_trailing_zero() -> None:
    assert format_number(152.0) == "152"
    assert format_number(148.6) == "148.6"
