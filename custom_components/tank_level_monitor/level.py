"""Resolve liquid depth from a top-mounted distance reading."""

from __future__ import annotations

import math

from .geometry import GeometryError
from .models import TankGeometry


def resolve_depth(geometry: TankGeometry, distance_m: float | None) -> float | None:
    """Return the liquid depth in meters, clamped to the tank's ceiling.

    The sensor looks down from the top of the tank, so depth is the maximum
    liquid column minus the measured distance. None means there is no valid
    level: the reading is missing or the shape has no ceiling configured.
    A degenerate (non-positive) ceiling gives depth 0.
    """
    if distance_m is None or not math.isfinite(distance_m):
        return None

    ceiling = geometry.max_liquid_height_m
    if ceiling is None:
        return None
    if not math.isfinite(ceiling):
        raise GeometryError(f"max liquid height must be finite, got {ceiling!r}")
    if ceiling <= 0:
        return 0.0

    return max(0.0, min(ceiling - distance_m, ceiling))
