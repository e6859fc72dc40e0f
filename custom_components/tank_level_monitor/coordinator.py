"""Coordinator for Tank Level Monitor data and updates."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
import logging

from homeassistant.const import (
    ATTR_UNIT_OF_MEASUREMENT,
    STATE_UNAVAILABLE,
    STATE_UNKNOWN,
    UnitOfLength,
)
from homeassistant.core import Event, HomeAssistant, State
from homeassistant.helpers.event import async_track_state_change_event
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator
from homeassistant.util import dt as dt_util
from homeassistant.util.unit_conversion import DistanceConverter

from .const import (
    DEFAULT_READING_HISTORY_SIZE,
    DEFAULT_SCAN_INTERVAL_SECONDS,
    DOMAIN,
)
from .geometry import GeometryError
from .history import (
    ReadingSummary,
    select_latest_reading,
    summarize_readings,
)
from .metrics import FleetEntry, TankMetrics, compute_tank_metrics
from .models import SensorReading, TankGeometry

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TankLevelData:
    """Snapshot of one tank's level data for sensors."""

    metrics: TankMetrics
    summary: ReadingSummary
    reading: SensorReading | None


class TankLevelCoordinator(DataUpdateCoordinator[TankLevelData]):
    """Coordinator turning distance sensor states into tank metrics."""

    def __init__(
        self,
        hass: HomeAssistant,
        tank_name: str,
        distance_sensor: str,
        geometry: TankGeometry,
        reading_history_size: int = DEFAULT_READING_HISTORY_SIZE,
        scan_interval: timedelta = timedelta(seconds=DEFAULT_SCAN_INTERVAL_SECONDS),
        entry_id: str | None = None,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass, _LOGGER, name=f"{DOMAIN}_{tank_name}", update_interval=scan_interval
        )

        self.hass = hass
        self.tank_name = tank_name
        self.distance_sensor = distance_sensor
        self.geometry = geometry
        self.entry_id = entry_id

        self._readings: deque[SensorReading] = deque(maxlen=reading_history_size)
        self._latest_reading: SensorReading | None = None

        self._unsub_distance = async_track_state_change_event(
            hass, [distance_sensor], self._handle_distance_change
        )

        self._initialize_reading()
        self._publish()

    @property
    def unique_key(self) -> str:
        """Return the identifier used for device and entity ids."""
        return self.entry_id or self.distance_sensor

    @property
    def latest_reading(self) -> SensorReading | None:
        """Return the latest known reading."""
        return self._latest_reading

    @property
    def readings(self) -> list[SensorReading]:
        """Return the readings in the current window, oldest first."""
        return list(self._readings)

    def fleet_entry(self) -> FleetEntry:
        """Return this tank's inputs for a fleet-wide computation."""
        return FleetEntry(self.unique_key, self.geometry, self._latest_reading)

    async def _async_update_data(self) -> TankLevelData:
        """Recompute metrics so that a silent sensor turns inactive."""
        state = self.hass.states.get(self.distance_sensor)
        if state is not None:
            self._record_reading(self._reading_from_state(state))
        return self._compute(dt_util.utcnow())

    async def async_shutdown(self) -> None:
        """Stop listening to the distance sensor."""
        await super().async_shutdown()
        if self._unsub_distance is not None:
            self._unsub_distance()
            self._unsub_distance = None

    def _initialize_reading(self) -> None:
        """Initialize the reading from the current distance sensor state."""
        state = self.hass.states.get(self.distance_sensor)
        if state is None:
            _LOGGER.debug("Distance sensor %s has no state yet", self.distance_sensor)
            return
        self._record_reading(self._reading_from_state(state))

    def _reading_from_state(self, state: State) -> SensorReading:
        """Convert a distance sensor state into a reading in meters."""
        observed_at = state.last_reported
        distance: float | None = None

        if state.state not in (STATE_UNKNOWN, STATE_UNAVAILABLE):
            try:
                distance = float(state.state)
            except (ValueError, TypeError):
                _LOGGER.warning(
                    "Invalid distance value from %s: %s",
                    self.distance_sensor,
                    state.state,
                )

        unit = state.attributes.get(ATTR_UNIT_OF_MEASUREMENT)
        if distance is not None and unit and unit != UnitOfLength.METERS:
            if unit in DistanceConverter.VALID_UNITS:
                distance = DistanceConverter.convert(
                    distance, unit, UnitOfLength.METERS
                )
            else:
                _LOGGER.warning(
                    "Unsupported unit %s on %s, assuming meters",
                    unit,
                    self.distance_sensor,
                )

        return SensorReading(
            tank_id=self.unique_key, distance_m=distance, observed_at=observed_at
        )

    async def _handle_distance_change(self, event: Event) -> None:
        """Handle distance sensor state change."""
        new_state = event.data.get("new_state")
        if new_state is None:
            return

        self._record_reading(self._reading_from_state(new_state))
        self._publish()

    def _record_reading(self, reading: SensorReading) -> None:
        """Add a reading to the window and track the latest one."""
        latest = self._latest_reading
        if (
            latest is not None
            and latest.observed_at == reading.observed_at
            and latest.distance_m == reading.distance_m
        ):
            return

        self._readings.append(reading)
        self._latest_reading = select_latest_reading(
            r for r in (latest, reading) if r is not None
        )
        _LOGGER.debug(
            "Reading for %s: %s m at %s",
            self.tank_name,
            reading.distance_m,
            reading.observed_at,
        )

    def _compute(self, now: datetime) -> TankLevelData:
        """Run the level engine against *now*."""
        try:
            metrics = compute_tank_metrics(self.geometry, self._latest_reading, now)
        except GeometryError as exc:
            _LOGGER.error("Invalid geometry for tank %s: %s", self.tank_name, exc)
            metrics = compute_tank_metrics(None, self._latest_reading, now)

        return TankLevelData(
            metrics=metrics,
            summary=summarize_readings(self._readings),
            reading=self._latest_reading,
        )

    def _publish(self, now: datetime | None = None) -> None:
        """Publish updated data to listeners."""
        self.async_set_updated_data(self._compute(now or dt_util.utcnow()))
