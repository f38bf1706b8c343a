"""Tests for wildfire_risk.utils.time_utils."""

from __future__ import annotations

from datetime import timezone

import pytest

from wildfire_risk.utils.time_utils import current_month, is_fire_season, is_summer, utcnow


def test_utcnow_is_aware() -> None:
    assert utcnow().tzinfo == timezone.utc


def test_current_month_in_range() -> None:
    assert 1 <= current_month() <= 12


@pytest.mark.parametrize(
    "latitude, month, expected",
    [
        (40.0, 5, True),
        (40.0, 9, True),
        (40.0, 10, False),
        (40.0, 1, False),
        (0.0, 7, True),
        (-33.0, 11, True),
        (-33.0, 3, True),
        (-33.0, 4, False),
        (-33.0, 7, False),
    ],
)
def test_is_fire_season(latitude: float, month: int, expected: bool) -> None:
    assert is_fire_season(latitude, month) is expected


@pytest.mark.parametrize("month", [1, 2, 6, 7, 8, 12])
def test_is_summer_either_hemisphere(month: int) -> None:
    assert is_summer(month)


@pytest.mark.parametrize("month", [3, 4, 5, 9, 10, 11])
def test_is_not_summer(month: int) -> None:
    assert not is_summer(month)


def test_is_summer_with_latitude() -> None:
    assert is_summer(7, latitude=45.0)
    assert not is_summer(7, latitude=-45.0)
    assert is_summer(1, latitude=-45.0)
    assert not is_summer(1, latitude=45.0)
