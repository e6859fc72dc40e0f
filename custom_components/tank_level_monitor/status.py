"""Safe-limit status classification."""

from __future__ import annotations

from dataclasses import dataclass
import math

from .const import (
    ALERT_HIGH_LEVEL,
    ALERT_LOW_LEVEL,
    ALERT_NORMAL,
    ALERT_NO_VALID_LEVEL,
)
from .models import LimitUnit, TankGeometry, TankStatus


@dataclass(frozen=True)
class Classification:
    """Status tag and alert message for one tank."""

    status: TankStatus
    alert: str


NORMAL = Classification(TankStatus.OK, ALERT_NORMAL)


def limit_is_set(value: float | None) -> bool:
    """Return True if a safe limit is configured (not None and not NaN)."""
    return value is not None and not math.isnan(value)


def classify_level(
    level: float | None,
    upper_limit: float | None,
    lower_limit: float | None,
    external: Classification | None = None,
) -> Classification:
    """Classify a level against the configured safe limits.

    Both comparisons are inclusive, so a level sitting exactly on a limit
    raises an alert. When neither limit is configured the externally supplied
    classification wins, falling back to OK.
    """
    if level is None:
        return Classification(TankStatus.UNKNOWN, ALERT_NO_VALID_LEVEL)

    has_upper = limit_is_set(upper_limit)
    has_lower = limit_is_set(lower_limit)

    if not has_upper and not has_lower:
        return external or NORMAL

    if has_upper and level >= upper_limit:
        return Classification(TankStatus.WARNING, ALERT_HIGH_LEVEL)
    if has_lower and level <= lower_limit:
        return Classification(TankStatus.WARNING, ALERT_LOW_LEVEL)

    return NORMAL


def level_for_limits(
    geometry: TankGeometry, volume_l: float | None, fill_pct: float | None
) -> float | None:
    """Pick the value the limits are compared against."""
    if geometry.limit_unit is LimitUnit.LITERS:
        return volume_l
    return fill_pct
