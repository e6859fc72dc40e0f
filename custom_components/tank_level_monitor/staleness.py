"""Reading freshness checks."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from homeassistant.util import dt as dt_util

from .const import STALE_AFTER_MINUTES

STALE_AFTER = timedelta(minutes=STALE_AFTER_MINUTES)


@dataclass(frozen=True)
class Freshness:
    """Age of the latest reading relative to "now"."""

    stale: bool
    minutes_since_last: float | None


def check_freshness(observed_at: datetime | None, now: datetime) -> Freshness:
    """Return whether a reading observed at *observed_at* is stale at *now*.

    A missing timestamp is always stale. Naive datetimes are taken as UTC.
    """
    if observed_at is None:
        return Freshness(stale=True, minutes_since_last=None)

    age = dt_util.as_utc(now) - dt_util.as_utc(observed_at)
    minutes = age.total_seconds() / 60

    return Freshness(stale=age > STALE_AFTER, minutes_since_last=round(minutes, 1))


def apply_staleness(
    freshness: Freshness, volume_l: float | None, capacity_l: float | None
) -> tuple[float | None, float | None]:
    """Return (volume_l, fill_pct) after the staleness override.

    A stale reading forces the volume to zero and recomputes the percentage
    against it; fresh values pass through.
    """
    if freshness.stale:
        volume_l = 0.0

    return volume_l, fill_percentage(volume_l, capacity_l)


def fill_percentage(volume_l: float | None, capacity_l: float | None) -> float | None:
    """Volume as a percentage of capacity, unclamped above 100."""
    if volume_l is None or capacity_l is None or capacity_l <= 0:
        return None
    return volume_l / capacity_l * 100
