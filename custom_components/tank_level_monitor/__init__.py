"""Tank Level Monitor Integration."""

import logging

import voluptuous as vol

from homeassistant.config_entries import SOURCE_IMPORT, ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.typing import ConfigType
from homeassistant.util import dt as dt_util

from .const import (
    DOMAIN,
    CONF_TANKS,
    CONF_READINGS,
    CONF_TANK_NAME,
    CONF_DISTANCE_SENSOR,
    CONF_TANK_SHAPE,
    CONF_LEVEL_MODEL,
    CONF_DIAMETER,
    CONF_LENGTH,
    CONF_WIDTH,
    CONF_MAX_HEIGHT,
    CONF_CAPACITY,
    CONF_UPPER_LIMIT,
    CONF_LOWER_LIMIT,
    CONF_LIMIT_UNIT,
    DEFAULT_LOWER_LIMIT,
    DEFAULT_UPPER_LIMIT,
    LEVEL_MODEL_GEOMETRIC,
    LEVEL_MODEL_LINEAR,
    LIMIT_UNIT_LITERS,
    LIMIT_UNIT_PERCENT,
    SERVICE_GET_FLEET_METRICS,
    SERVICE_GET_TANK_HISTORY,
    SHAPE_CYLINDER,
    SHAPE_RECTANGULAR,
)
from .coordinator import TankLevelCoordinator
from .geometry import GeometryError
from .history import compute_history, summarize_readings
from .metrics import compute_fleet_metrics
from .models import SensorReading, TankGeometry

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.SENSOR]

TANK_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_TANK_NAME): cv.string,
        vol.Required(CONF_DISTANCE_SENSOR): cv.entity_id,
        vol.Required(CONF_TANK_SHAPE): vol.In([SHAPE_CYLINDER, SHAPE_RECTANGULAR]),
        vol.Optional(CONF_LEVEL_MODEL, default=LEVEL_MODEL_GEOMETRIC): vol.In(
            [LEVEL_MODEL_GEOMETRIC, LEVEL_MODEL_LINEAR]
        ),
        vol.Optional(CONF_DIAMETER): cv.positive_float,
        vol.Optional(CONF_LENGTH): cv.positive_float,
        vol.Optional(CONF_WIDTH): cv.positive_float,
        vol.Optional(CONF_MAX_HEIGHT): cv.positive_float,
        vol.Required(CONF_CAPACITY): cv.positive_float,
        vol.Optional(CONF_UPPER_LIMIT, default=DEFAULT_UPPER_LIMIT): vol.Coerce(float),
        vol.Optional(CONF_LOWER_LIMIT, default=DEFAULT_LOWER_LIMIT): vol.Coerce(float),
        vol.Optional(CONF_LIMIT_UNIT, default=LIMIT_UNIT_PERCENT): vol.In(
            [LIMIT_UNIT_PERCENT, LIMIT_UNIT_LITERS]
        ),
    }
)

CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {
                vol.Required(CONF_TANKS): vol.All(cv.ensure_list, [TANK_SCHEMA]),
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the Tank Level Monitor component from YAML."""
    hass.data.setdefault(DOMAIN, {})

    def _coordinators() -> list[TankLevelCoordinator]:
        return [
            c for c in hass.data[DOMAIN].values() if isinstance(c, TankLevelCoordinator)
        ]

    async def handle_get_fleet_metrics(call: ServiceCall) -> ServiceResponse:
        """Return the metrics of every configured tank, keyed by entry."""
        entry_id = call.data.get("entry_id")

        coordinators = [
            c for c in _coordinators() if entry_id is None or c.unique_key == entry_id
        ]
        if entry_id and not coordinators:
            _LOGGER.warning("No coordinator found for entry_id: %s", entry_id)

        fleet = compute_fleet_metrics(
            (c.fleet_entry() for c in coordinators), dt_util.utcnow(), strict=False
        )
        names = {c.unique_key: c.tank_name for c in coordinators}

        return {
            "tanks": {
                key: {"tank_name": names[key], **metrics.as_dict()}
                for key, metrics in fleet.items()
            }
        }

    async def handle_get_tank_history(call: ServiceCall) -> ServiceResponse:
        """Return per-reading levels and the distance summary of one tank."""
        entry_id = call.data["entry_id"]
        coordinator = hass.data[DOMAIN].get(entry_id)
        if not isinstance(coordinator, TankLevelCoordinator):
            raise HomeAssistantError(f"No tank configured for entry {entry_id}")

        if CONF_READINGS in call.data:
            readings = [
                SensorReading.from_mapping(coordinator.unique_key, item)
                for item in call.data[CONF_READINGS]
            ]
        else:
            readings = coordinator.readings

        try:
            points = compute_history(coordinator.geometry, readings)
        except GeometryError as exc:
            raise HomeAssistantError(f"Invalid tank geometry: {exc}") from exc

        return {
            "tank_name": coordinator.tank_name,
            "points": [point.as_dict() for point in points],
            "summary": summarize_readings(readings).as_dict(),
        }

    hass.services.async_register(
        DOMAIN,
        SERVICE_GET_FLEET_METRICS,
        handle_get_fleet_metrics,
        schema=vol.Schema({vol.Optional("entry_id"): cv.string}),
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        DOMAIN,
        SERVICE_GET_TANK_HISTORY,
        handle_get_tank_history,
        schema=vol.Schema(
            {
                vol.Required("entry_id"): cv.string,
                vol.Optional(CONF_READINGS): vol.All(cv.ensure_list, [dict]),
            }
        ),
        supports_response=SupportsResponse.ONLY,
    )

    # Support YAML configuration (legacy)
    if DOMAIN in config:
        for tank in config[DOMAIN][CONF_TANKS]:
            hass.async_create_task(
                hass.config_entries.flow.async_init(
                    DOMAIN,
                    context={"source": SOURCE_IMPORT},
                    data=tank,
                )
            )

    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Tank Level Monitor from a config entry."""
    hass.data.setdefault(DOMAIN, {})

    # Merge entry.data and entry.options (options take precedence)
    config = {**entry.data, **entry.options}

    distance_sensor = config.get(CONF_DISTANCE_SENSOR)
    geometry = TankGeometry.from_mapping(config)

    if not distance_sensor or geometry.shape is None:
        _LOGGER.error("Missing required configuration for entry %s", entry.entry_id)
        return False

    coordinator = TankLevelCoordinator(
        hass,
        tank_name=config.get(CONF_TANK_NAME) or entry.title,
        distance_sensor=distance_sensor,
        geometry=geometry,
        entry_id=entry.entry_id,
    )

    hass.data[DOMAIN][entry.entry_id] = coordinator

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    # Register update listener for options changes
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))

    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)

    if unload_ok:
        coordinator = hass.data[DOMAIN].pop(entry.entry_id)
        await coordinator.async_shutdown()

    return unload_ok


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload config entry when options change."""
    await hass.config_entries.async_reload(entry.entry_id)
