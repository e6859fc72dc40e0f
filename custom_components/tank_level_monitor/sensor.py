"""Sensor platform for Tank Level Monitor."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE, UnitOfLength, UnitOfVolume
from homeassistant.core import HomeAssistant
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import TankLevelCoordinator
from .metrics import TankMetrics
from .models import TankStatus

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the sensor platform from a config entry."""
    coordinator: TankLevelCoordinator | None = hass.data[DOMAIN].get(entry.entry_id)
    if coordinator is None:
        _LOGGER.error("No coordinator found for entry %s", entry.entry_id)
        return

    async_add_entities(_build_sensors(coordinator))


def _build_sensors(coordinator: TankLevelCoordinator) -> list[SensorEntity]:
    """Create the sensors for one tank."""
    return [
        TankDepthSensor(coordinator),
        TankVolumeSensor(coordinator),
        TankFillPercentageSensor(coordinator),
        TankFreeVolumeSensor(coordinator),
        TankStatusSensor(coordinator),
        TankDistanceSummarySensor(coordinator),
    ]


class TankLevelEntity(CoordinatorEntity[TankLevelCoordinator], SensorEntity):
    """Base entity for a tank's sensors."""

    _attr_has_entity_name = True

    def __init__(self, coordinator: TankLevelCoordinator, key: str, name: str) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_name = name
        self._attr_unique_id = f"{DOMAIN}_{coordinator.unique_key}_{key}"
        shape = coordinator.geometry.shape
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, coordinator.unique_key)},
            name=coordinator.tank_name,
            manufacturer="Tank Level Monitor",
            model=f"{shape.value.title()} tank" if shape else "Tank",
        )

    @property
    def metrics(self) -> TankMetrics | None:
        """Return the latest metrics, if any."""
        data = self.coordinator.data
        return data.metrics if data is not None else None


class TankDepthSensor(TankLevelEntity):
    """Liquid depth from the tank bottom."""

    _attr_device_class = SensorDeviceClass.DISTANCE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfLength.METERS
    _attr_icon = "mdi:arrow-expand-vertical"

    def __init__(self, coordinator: TankLevelCoordinator) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, "depth", "Depth")

    @property
    def native_value(self) -> float | None:
        """Return the state of the sensor."""
        metrics = self.metrics
        return metrics.depth_m if metrics else None


class TankVolumeSensor(TankLevelEntity):
    """Liquid volume, zero while the reading is stale."""

    _attr_device_class = SensorDeviceClass.VOLUME_STORAGE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfVolume.LITERS
    _attr_icon = "mdi:storage-tank"

    def __init__(self, coordinator: TankLevelCoordinator) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, "volume", "Volume")

    @property
    def native_value(self) -> float | None:
        """Return the state of the sensor."""
        metrics = self.metrics
        return metrics.volume_l if metrics else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return additional attributes."""
        metrics = self.metrics
        if metrics is None:
            return {}
        return {
            "raw_volume_l": metrics.raw_volume_l,
            "capacity_l": metrics.capacity_l,
        }


class TankFillPercentageSensor(TankLevelEntity):
    """Volume as a percentage of configured capacity."""

    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_icon = "mdi:gauge"

    def __init__(self, coordinator: TankLevelCoordinator) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, "fill_percentage", "Fill percentage")

    @property
    def native_value(self) -> float | None:
        """Return the state of the sensor."""
        metrics = self.metrics
        return metrics.fill_pct if metrics else None


class TankFreeVolumeSensor(TankLevelEntity):
    """Remaining free capacity."""

    _attr_device_class = SensorDeviceClass.VOLUME_STORAGE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfVolume.LITERS
    _attr_icon = "mdi:storage-tank-outline"

    def __init__(self, coordinator: TankLevelCoordinator) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, "free_volume", "Free volume")

    @property
    def native_value(self) -> int | None:
        """Return the state of the sensor."""
        metrics = self.metrics
        return metrics.free_volume_l if metrics else None


class TankStatusSensor(TankLevelEntity):
    """Status tag with the alert message as attribute."""

    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [status.value for status in TankStatus]
    _attr_icon = "mdi:alert-circle-outline"

    def __init__(self, coordinator: TankLevelCoordinator) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, "status", "Status")

    @property
    def native_value(self) -> str | None:
        """Return the state of the sensor."""
        metrics = self.metrics
        return metrics.status.value if metrics else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return additional attributes."""
        data = self.coordinator.data
        if data is None:
            return {}

        attrs: dict[str, Any] = {
            "alert": data.metrics.alert,
            "stale": data.metrics.stale,
            "minutes_since_last": data.metrics.minutes_since_last,
        }
        if data.reading is not None and data.reading.observed_at is not None:
            attrs["last_reading"] = data.reading.observed_at.isoformat()
        return attrs


class TankDistanceSummarySensor(TankLevelEntity):
    """Average raw sensor distance over the recent reading window."""

    _attr_device_class = SensorDeviceClass.DISTANCE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _attr_native_unit_of_measurement = UnitOfLength.METERS
    _attr_icon = "mdi:chart-bell-curve"
    _attr_entity_registry_enabled_default = False

    def __init__(self, coordinator: TankLevelCoordinator) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, "distance_average", "Average distance")

    @property
    def native_value(self) -> float | None:
        """Return the state of the sensor."""
        data = self.coordinator.data
        return data.summary.avg_m if data else None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return additional attributes."""
        data = self.coordinator.data
        if data is None:
            return {}

        summary = data.summary
        return {
            "min_m": summary.min_m,
            "max_m": summary.max_m,
            "samples": summary.samples,
            "period_from": (
                summary.period_from.isoformat() if summary.period_from else None
            ),
            "period_to": summary.period_to.isoformat() if summary.period_to else None,
        }
