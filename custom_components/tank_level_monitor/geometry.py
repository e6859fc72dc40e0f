"""Geometry utilities for liquid storage tanks."""

from __future__ import annotations

import math

from .models import LevelModel, TankGeometry, TankShape


class GeometryError(ValueError):
    """Raised when a geometry input is NaN or infinite."""


def _require_finite(**values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise GeometryError(f"{name} must be finite, got {value!r}")


def cylinder_volume_liters(diameter_m: float, length_m: float, depth_m: float) -> float:
    """Calculate liquid volume (liters) in a horizontal cylindrical tank.

    No rounding is applied here; rounding must be done at output only.
    """
    _require_finite(diameter_m=diameter_m, length_m=length_m, depth_m=depth_m)

    if diameter_m <= 0 or length_m <= 0:
        return 0.0
    if depth_m <= 0:
        return 0.0

    r = diameter_m / 2

    if depth_m >= diameter_m:
        return math.pi * r**2 * length_m * 1000.0

    h = depth_m
    area = (
        r**2 * math.acos((r - h) / r)
        - (r - h) * math.sqrt(2 * r * h - h**2)
    )

    return length_m * area * 1000.0


def rectangular_volume_liters(width_m: float, length_m: float, depth_m: float) -> float:
    """Calculate liquid volume (liters) in a rectangular tank.

    The depth is expected to be clamped to the tank height by the caller.
    """
    _require_finite(width_m=width_m, length_m=length_m, depth_m=depth_m)

    if width_m <= 0 or length_m <= 0 or depth_m <= 0:
        return 0.0

    return width_m * length_m * depth_m * 1000.0


def linear_volume_liters(
    capacity_l: float, max_height_m: float, depth_m: float
) -> float:
    """Volume as capacity scaled by the depth to height ratio."""
    _require_finite(capacity_l=capacity_l, max_height_m=max_height_m, depth_m=depth_m)

    if capacity_l <= 0 or max_height_m <= 0 or depth_m <= 0:
        return 0.0

    return capacity_l * min(depth_m, max_height_m) / max_height_m


def full_volume_liters(geometry: TankGeometry) -> float | None:
    """Return the geometric volume of a completely full tank."""
    height = geometry.max_liquid_height_m
    if height is None:
        return None
    return _shape_volume(geometry, height)


def _shape_volume(geometry: TankGeometry, depth_m: float) -> float | None:
    if geometry.shape is TankShape.CYLINDER:
        if geometry.diameter_m is None or geometry.length_m is None:
            return None
        return cylinder_volume_liters(geometry.diameter_m, geometry.length_m, depth_m)

    if geometry.shape is TankShape.RECTANGULAR:
        if geometry.width_m is None or geometry.length_m is None:
            return None
        height = geometry.max_height_m
        if height is not None and depth_m > height:
            depth_m = height
        return rectangular_volume_liters(geometry.width_m, geometry.length_m, depth_m)

    return None


def volume_for_depth(geometry: TankGeometry, depth_m: float) -> float | None:
    """Convert a resolved depth into liters using the tank's level model.

    Returns None when the geometry lacks the dimensions the model needs.
    """
    if geometry.level_model is LevelModel.LINEAR:
        height = geometry.max_liquid_height_m
        if geometry.capacity_l is None or height is None:
            return None
        return linear_volume_liters(geometry.capacity_l, height, depth_m)

    return _shape_volume(geometry, depth_m)
