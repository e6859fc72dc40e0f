"""Shared fixtures for tank level monitor tests."""

from __future__ import annotations

import sys
from pathlib import Path
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

# Ensure custom_components is importable
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

pytest.importorskip("homeassistant")

from homeassistant.util import dt as dt_util

from custom_components.tank_level_monitor.models import (
    LimitUnit,
    TankGeometry,
    TankShape,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=dt_util.UTC)


@pytest.fixture
def mock_hass():
    """Create a mocked HomeAssistant instance."""
    hass = MagicMock()
    hass.states.get.return_value = None
    hass.async_create_task.return_value = None
    hass.bus.async_listen.return_value = MagicMock()
    hass.data = {}
    return hass


@pytest.fixture
def cylinder_geometry() -> TankGeometry:
    """A 2 m x 5 m horizontal cylinder holding about 15708 L."""
    return make_cylinder()


@pytest.fixture
def fire_tank_geometry() -> TankGeometry:
    """The 8.9 m x 5.15 m x 17.9 m rectangular fire water tank."""
    return TankGeometry(
        shape=TankShape.RECTANGULAR,
        width_m=8.9,
        length_m=5.15,
        max_height_m=17.9,
        capacity_l=820000.0,
        upper_limit=90.0,
        lower_limit=10.0,
    )


def make_cylinder(**overrides) -> TankGeometry:
    """Build cylinder geometry with sensible defaults."""
    values = {
        "shape": TankShape.CYLINDER,
        "diameter_m": 2.0,
        "length_m": 5.0,
        "capacity_l": 15708.0,
        "upper_limit": 90.0,
        "lower_limit": 10.0,
        "limit_unit": LimitUnit.PERCENT,
    }
    values.update(overrides)
    return TankGeometry(**values)


def make_state(
    value, observed_at: datetime | None = None, unit: str | None = "m"
) -> MagicMock:
    """Create a mocked distance sensor state."""
    when = observed_at or dt_util.utcnow()
    state = MagicMock()
    state.state = str(value)
    state.attributes = {"unit_of_measurement": unit} if unit else {}
    state.last_updated = when
    state.last_reported = when
    return state


def make_coordinator(
    mock_hass,
    distance_sensor="sensor.tank_distance",
    tank_name="Water Tank",
    geometry: TankGeometry | None = None,
    entry_id="test_entry_id",
    initial_distance=None,
    observed_at: datetime | None = None,
    **kwargs,
):
    """Create a TankLevelCoordinator with mocked HA dependencies.

    This patches async_track_state_change_event to avoid real HA
    interactions.
    """
    from custom_components.tank_level_monitor.coordinator import TankLevelCoordinator

    # Set up initial sensor state if requested
    if initial_distance is not None:
        mock_hass.states.get.return_value = make_state(initial_distance, observed_at)
    else:
        mock_hass.states.get.return_value = None

    with (
        patch(
            "custom_components.tank_level_monitor.coordinator.async_track_state_change_event"
        ) as mock_track,
        patch(
            "homeassistant.helpers.frame.report_usage"
        ),
    ):
        mock_track.return_value = MagicMock()

        coordinator = TankLevelCoordinator(
            mock_hass,
            tank_name=tank_name,
            distance_sensor=distance_sensor,
            geometry=geometry or make_cylinder(),
            entry_id=entry_id,
            **kwargs,
        )

    return coordinator


def minutes_ago(minutes: float) -> datetime:
    """Return an aware UTC datetime *minutes* before now."""
    return dt_util.utcnow() - timedelta(minutes=minutes)
