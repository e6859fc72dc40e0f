"""Data model shared by the tank level engine and the integration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from homeassistant.util import dt as dt_util

from .const import (
    CONF_CAPACITY,
    CONF_DIAMETER,
    CONF_LENGTH,
    CONF_LEVEL_MODEL,
    CONF_LIMIT_UNIT,
    CONF_LOWER_LIMIT,
    CONF_MAX_HEIGHT,
    CONF_TANK_SHAPE,
    CONF_UPPER_LIMIT,
    CONF_WIDTH,
    LEVEL_MODEL_GEOMETRIC,
    LEVEL_MODEL_LINEAR,
    LIMIT_UNIT_LITERS,
    LIMIT_UNIT_PERCENT,
    SHAPE_CYLINDER,
    SHAPE_RECTANGULAR,
    STATUS_INACTIVE,
    STATUS_OK,
    STATUS_UNKNOWN,
    STATUS_WARNING,
)


class TankShape(StrEnum):
    """Supported tank shapes."""

    CYLINDER = SHAPE_CYLINDER
    RECTANGULAR = SHAPE_RECTANGULAR


class LimitUnit(StrEnum):
    """Unit the safe limits are expressed in."""

    PERCENT = LIMIT_UNIT_PERCENT
    LITERS = LIMIT_UNIT_LITERS


class LevelModel(StrEnum):
    """How depth is turned into volume."""

    GEOMETRIC = LEVEL_MODEL_GEOMETRIC
    LINEAR = LEVEL_MODEL_LINEAR


class TankStatus(StrEnum):
    """Discrete tank status."""

    OK = STATUS_OK
    WARNING = STATUS_WARNING
    INACTIVE = STATUS_INACTIVE
    UNKNOWN = STATUS_UNKNOWN


def coerce_float(value: Any) -> float | None:
    """Convert a config or state value to float, or None when not numeric.

    NaN and infinity are returned as-is; the geometry layer rejects them.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _coerce_enum(enum_cls: type[StrEnum], value: Any, default: StrEnum | None):
    if value is None or value == "":
        return default
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return default


@dataclass(frozen=True)
class TankGeometry:
    """Per-tank geometry and safe-limit configuration.

    Dimensions are meters, capacity is liters. Fields that do not apply to
    the configured shape are left as None.
    """

    shape: TankShape | None
    capacity_l: float | None = None
    diameter_m: float | None = None
    length_m: float | None = None
    width_m: float | None = None
    max_height_m: float | None = None
    upper_limit: float | None = None
    lower_limit: float | None = None
    limit_unit: LimitUnit = LimitUnit.PERCENT
    level_model: LevelModel = LevelModel.GEOMETRIC

    @property
    def max_liquid_height_m(self) -> float | None:
        """Return the tallest possible liquid column for this shape."""
        if self.shape is TankShape.CYLINDER:
            return self.diameter_m
        if self.shape is TankShape.RECTANGULAR:
            return self.max_height_m
        return None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> TankGeometry:
        """Build geometry from a config entry mapping."""
        shape_value = data.get(CONF_TANK_SHAPE)
        shape = _coerce_enum(TankShape, shape_value, None)

        return cls(
            shape=shape,
            capacity_l=coerce_float(data.get(CONF_CAPACITY)),
            diameter_m=coerce_float(data.get(CONF_DIAMETER)),
            length_m=coerce_float(data.get(CONF_LENGTH)),
            width_m=coerce_float(data.get(CONF_WIDTH)),
            max_height_m=coerce_float(data.get(CONF_MAX_HEIGHT)),
            upper_limit=coerce_float(data.get(CONF_UPPER_LIMIT)),
            lower_limit=coerce_float(data.get(CONF_LOWER_LIMIT)),
            limit_unit=_coerce_enum(
                LimitUnit, data.get(CONF_LIMIT_UNIT), LimitUnit.PERCENT
            ),
            level_model=_coerce_enum(
                LevelModel, data.get(CONF_LEVEL_MODEL), LevelModel.GEOMETRIC
            ),
        )


@dataclass(frozen=True)
class SensorReading:
    """One raw distance reading from a top-mounted sensor."""

    tank_id: str
    distance_m: float | None
    observed_at: datetime | None

    @classmethod
    def from_mapping(cls, tank_id: str, data: Mapping[str, Any]) -> SensorReading:
        """Build a reading from `distance_m` and an ISO-8601 `observed_at`."""
        observed_at = data.get("observed_at")
        if isinstance(observed_at, str):
            try:
                observed_at = dt_util.parse_datetime(observed_at)
            except (TypeError, ValueError):
                observed_at = None
        elif not isinstance(observed_at, datetime):
            observed_at = None

        return cls(
            tank_id=tank_id,
            distance_m=coerce_float(data.get("distance_m")),
            observed_at=observed_at,
        )
