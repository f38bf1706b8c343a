"""
Calendar helpers for seasonal fire-risk logic.

Two summer notions are used in the codebase:
  - Fire season (per-tree seasonal bonus): May–September in the northern
    hemisphere, November–March in the southern hemisphere.
  - Meteorological summer (explainer weight shift): June–August north,
    December–February south.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

NORTHERN_FIRE_SEASON: frozenset[int] = frozenset({5, 6, 7, 8, 9})
SOUTHERN_FIRE_SEASON: frozenset[int] = frozenset({11, 12, 1, 2, 3})

NORTHERN_SUMMER: frozenset[int] = frozenset({6, 7, 8})
SOUTHERN_SUMMER: frozenset[int] = frozenset({12, 1, 2})


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(tz=timezone.utc)


def current_month() -> int:
    """Return the current UTC calendar month (1–12)."""
    return utcnow().month


def is_fire_season(latitude: float, month: int) -> bool:
    """True if ``month`` falls in the local fire season for ``latitude``.

    Latitude 0 counts as northern.
    """
    if latitude >= 0:
        return month in NORTHERN_FIRE_SEASON
    return month in SOUTHERN_FIRE_SEASON


def is_summer(month: int, latitude: Optional[float] = None) -> bool:
    """True if ``month`` is meteorological summer.

    Without a latitude either hemisphere's summer counts.
    """
    if latitude is None:
        return month in NORTHERN_SUMMER or month in SOUTHERN_SUMMER
    if latitude >= 0:
        return month in NORTHERN_SUMMER
    return month in SOUTHERN_SUMMER
