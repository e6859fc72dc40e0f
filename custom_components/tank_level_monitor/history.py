"""Helpers over a window of recent readings."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import datetime
import math
from typing import Any

from homeassistant.util import dt as dt_util

from .geometry import volume_for_depth
from .level import resolve_depth
from .models import SensorReading, TankGeometry
from .staleness import fill_percentage


@dataclass(frozen=True)
class HistoryPoint:
    """Level derived from one historical reading."""

    observed_at: datetime | None
    distance_m: float | None
    depth_m: float | None
    volume_l: float | None
    fill_pct: float | None

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-safe mapping."""
        data = asdict(self)
        data["observed_at"] = _isoformat(self.observed_at)
        return data


@dataclass(frozen=True)
class ReadingSummary:
    """Min/max/avg of the raw distances in a window."""

    period_from: datetime | None
    period_to: datetime | None
    min_m: float | None
    max_m: float | None
    avg_m: float | None
    samples: int

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-safe mapping."""
        data = asdict(self)
        data["period_from"] = _isoformat(self.period_from)
        data["period_to"] = _isoformat(self.period_to)
        return data


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def select_latest_reading(readings: Iterable[SensorReading]) -> SensorReading | None:
    """Return the reading with the latest timestamp.

    Ties go to the reading that came later in *readings*; readings without a
    timestamp only win when nothing else is available.
    """
    latest: SensorReading | None = None
    for reading in readings:
        if latest is None:
            latest = reading
            continue
        if reading.observed_at is None:
            if latest.observed_at is None:
                latest = reading
            continue
        if latest.observed_at is None or dt_util.as_utc(
            reading.observed_at
        ) >= dt_util.as_utc(latest.observed_at):
            latest = reading
    return latest


def compute_history(
    geometry: TankGeometry, readings: Iterable[SensorReading]
) -> list[HistoryPoint]:
    """Compute depth, volume and fill percentage for each reading.

    History points carry no staleness override and no status; they describe
    what each reading measured at the time.
    """
    points: list[HistoryPoint] = []
    for reading in readings:
        depth = resolve_depth(geometry, reading.distance_m)
        volume = volume_for_depth(geometry, depth) if depth is not None else None
        pct = fill_percentage(volume, geometry.capacity_l)
        points.append(
            HistoryPoint(
                observed_at=reading.observed_at,
                distance_m=reading.distance_m,
                depth_m=None if depth is None else round(depth, 3),
                volume_l=None if volume is None else round(volume, 1),
                fill_pct=None if pct is None else round(pct, 1),
            )
        )
    return points


def summarize_readings(readings: Iterable[SensorReading]) -> ReadingSummary:
    """Fold the valid distances of a window into min, max and average."""
    distances: list[float] = []
    timestamps: list[datetime] = []

    for reading in readings:
        if reading.observed_at is not None:
            timestamps.append(dt_util.as_utc(reading.observed_at))
        if reading.distance_m is not None and math.isfinite(reading.distance_m):
            distances.append(reading.distance_m)

    if not distances:
        return ReadingSummary(
            period_from=min(timestamps, default=None),
            period_to=max(timestamps, default=None),
            min_m=None,
            max_m=None,
            avg_m=None,
            samples=0,
        )

    return ReadingSummary(
        period_from=min(timestamps, default=None),
        period_to=max(timestamps, default=None),
        min_m=round(min(distances), 3),
        max_m=round(max(distances), 3),
        avg_m=round(sum(distances) / len(distances), 3),
        samples=len(distances),
    )
