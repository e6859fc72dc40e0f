"""Per-tank and fleet-wide tank level metrics."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import datetime
import logging
import math
from typing import Any, NamedTuple

from .const import ALERT_NO_DATA, ALERT_NO_VALID_LEVEL, ALERT_STALE
from .geometry import GeometryError, volume_for_depth
from .level import resolve_depth
from .models import SensorReading, TankGeometry, TankStatus
from .staleness import apply_staleness, check_freshness
from .status import Classification, classify_level, level_for_limits

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TankMetrics:
    """Computed level snapshot for one tank.

    fill_pct may exceed 100 when the configured capacity is smaller than the
    geometric volume; that is a configuration problem, not clamped here.
    """

    depth_m: float | None
    volume_l: float | None
    fill_pct: float | None
    free_volume_l: int | None
    capacity_l: float | None
    raw_volume_l: float | None
    status: TankStatus
    alert: str
    stale: bool
    minutes_since_last: float | None

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-safe mapping."""
        data = asdict(self)
        data["status"] = str(self.status)
        return data


class FleetEntry(NamedTuple):
    """One configured tank and its latest reading, either may be missing."""

    tank_id: str
    geometry: TankGeometry | None
    reading: SensorReading | None


def _round(value: float | None, digits: int) -> float | None:
    return None if value is None else round(value, digits)


def _free_volume(capacity_l: float | None, volume_l: float | None) -> int | None:
    if capacity_l is None or volume_l is None:
        return None
    return round(max(capacity_l - volume_l, 0.0))


def _no_level(
    capacity_l: float | None,
    classification: Classification,
    stale: bool,
    minutes_since_last: float | None,
) -> TankMetrics:
    return TankMetrics(
        depth_m=None,
        volume_l=None,
        fill_pct=None,
        free_volume_l=None,
        capacity_l=capacity_l,
        raw_volume_l=None,
        status=classification.status,
        alert=classification.alert,
        stale=stale,
        minutes_since_last=minutes_since_last,
    )


def compute_tank_metrics(
    geometry: TankGeometry | None,
    reading: SensorReading | None,
    now: datetime,
) -> TankMetrics:
    """Compute depth, volume, fill percentage and status for one tank.

    Raises GeometryError when a geometry value is NaN or infinite.
    """
    if reading is None:
        capacity = geometry.capacity_l if geometry is not None else None
        return _no_level(
            capacity, Classification(TankStatus.UNKNOWN, ALERT_NO_DATA), True, None
        )

    freshness = check_freshness(reading.observed_at, now)
    inactive = Classification(TankStatus.INACTIVE, ALERT_STALE)

    if geometry is None or geometry.shape is None:
        capacity = geometry.capacity_l if geometry is not None else None
        classification = (
            inactive
            if freshness.stale
            else Classification(TankStatus.UNKNOWN, ALERT_NO_DATA)
        )
        return _no_level(
            capacity, classification, freshness.stale, freshness.minutes_since_last
        )

    capacity = geometry.capacity_l
    if capacity is not None and not math.isfinite(capacity):
        raise GeometryError(f"capacity_l must be finite, got {capacity!r}")

    depth = resolve_depth(geometry, reading.distance_m)
    raw_volume = volume_for_depth(geometry, depth) if depth is not None else None

    volume, fill_pct = apply_staleness(freshness, raw_volume, capacity)

    if freshness.stale:
        classification = inactive
    elif depth is None:
        classification = Classification(TankStatus.UNKNOWN, ALERT_NO_VALID_LEVEL)
    else:
        classification = classify_level(
            level_for_limits(geometry, volume, fill_pct),
            geometry.upper_limit,
            geometry.lower_limit,
        )

    _LOGGER.debug(
        "Tank %s: distance=%s depth=%s raw=%s volume=%s fill=%s status=%s",
        reading.tank_id,
        reading.distance_m,
        depth,
        raw_volume,
        volume,
        fill_pct,
        classification.status,
    )

    return TankMetrics(
        depth_m=_round(depth, 3),
        volume_l=_round(volume, 1),
        fill_pct=_round(fill_pct, 1),
        free_volume_l=_free_volume(capacity, volume),
        capacity_l=capacity,
        raw_volume_l=_round(raw_volume, 1),
        status=classification.status,
        alert=classification.alert,
        stale=freshness.stale,
        minutes_since_last=freshness.minutes_since_last,
    )


def compute_fleet_metrics(
    tanks: Iterable[FleetEntry], now: datetime, strict: bool = True
) -> dict[str, TankMetrics]:
    """Compute metrics for every tank against the same "now".

    Tanks are independent of each other. With *strict* a GeometryError for
    one tank propagates to the caller; otherwise it is logged and only that
    tank degrades to the metrics of a tank without geometry.
    """
    fleet: dict[str, TankMetrics] = {}
    for entry in tanks:
        try:
            fleet[entry.tank_id] = compute_tank_metrics(
                entry.geometry, entry.reading, now
            )
        except GeometryError as exc:
            if strict:
                raise
            _LOGGER.error("Invalid geometry for tank %s: %s", entry.tank_id, exc)
            fleet[entry.tank_id] = compute_tank_metrics(None, entry.reading, now)
    return fleet
