"""Config flow for Tank Level Monitor integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers import selector

from .const import (
    DOMAIN,
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
    DEFAULT_TANK_NAME,
    DEFAULT_UPPER_LIMIT,
    DEFAULT_LOWER_LIMIT,
    SHAPE_CYLINDER,
    SHAPE_RECTANGULAR,
    LEVEL_MODEL_GEOMETRIC,
    LEVEL_MODEL_LINEAR,
    LIMIT_UNIT_PERCENT,
    LIMIT_UNIT_LITERS,
)
from .geometry import GeometryError, full_volume_liters
from .models import TankGeometry
from .status import limit_is_set

_LOGGER = logging.getLogger(__name__)


def _meters(maximum: float = 100) -> selector.NumberSelector:
    return selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=0.01,
            max=maximum,
            step=0.01,
            mode=selector.NumberSelectorMode.BOX,
            unit_of_measurement="m",
        )
    )


def _build_user_schema(defaults: dict[str, Any]) -> vol.Schema:
    """Build the schema for the tank identity step."""
    return vol.Schema(
        {
            vol.Required(
                CONF_TANK_NAME,
                default=defaults.get(CONF_TANK_NAME, DEFAULT_TANK_NAME),
            ): selector.TextSelector(),
            vol.Required(
                CONF_DISTANCE_SENSOR,
                default=defaults.get(CONF_DISTANCE_SENSOR),
            ): selector.EntitySelector(
                selector.EntitySelectorConfig(domain="sensor")
            ),
            vol.Required(
                CONF_TANK_SHAPE,
                default=defaults.get(CONF_TANK_SHAPE, SHAPE_CYLINDER),
            ): selector.SelectSelector(
                selector.SelectSelectorConfig(
                    options=[SHAPE_CYLINDER, SHAPE_RECTANGULAR],
                    mode=selector.SelectSelectorMode.DROPDOWN,
                    translation_key=CONF_TANK_SHAPE,
                )
            ),
            vol.Required(
                CONF_LEVEL_MODEL,
                default=defaults.get(CONF_LEVEL_MODEL, LEVEL_MODEL_GEOMETRIC),
            ): selector.SelectSelector(
                selector.SelectSelectorConfig(
                    options=[LEVEL_MODEL_GEOMETRIC, LEVEL_MODEL_LINEAR],
                    mode=selector.SelectSelectorMode.DROPDOWN,
                    translation_key=CONF_LEVEL_MODEL,
                )
            ),
        }
    )


def _build_geometry_schema(shape: str, defaults: dict[str, Any]) -> vol.Schema:
    """Build the shared geometry schema for config and options flows."""
    fields: dict[Any, Any] = {}

    if shape == SHAPE_RECTANGULAR:
        fields[
            vol.Required(CONF_WIDTH, default=defaults.get(CONF_WIDTH, 2.0))
        ] = _meters()
        fields[
            vol.Required(CONF_LENGTH, default=defaults.get(CONF_LENGTH, 2.0))
        ] = _meters()
        fields[
            vol.Required(CONF_MAX_HEIGHT, default=defaults.get(CONF_MAX_HEIGHT, 2.0))
        ] = _meters()
    else:
        fields[
            vol.Required(CONF_DIAMETER, default=defaults.get(CONF_DIAMETER, 2.0))
        ] = _meters(maximum=20)
        fields[
            vol.Required(CONF_LENGTH, default=defaults.get(CONF_LENGTH, 5.0))
        ] = _meters()

    fields[
        vol.Required(CONF_CAPACITY, default=defaults.get(CONF_CAPACITY, 10000))
    ] = selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=1,
            max=10_000_000,
            mode=selector.NumberSelectorMode.BOX,
            unit_of_measurement="L",
        )
    )
    fields[
        vol.Required(
            CONF_LIMIT_UNIT, default=defaults.get(CONF_LIMIT_UNIT, LIMIT_UNIT_PERCENT)
        )
    ] = selector.SelectSelector(
        selector.SelectSelectorConfig(
            options=[LIMIT_UNIT_PERCENT, LIMIT_UNIT_LITERS],
            mode=selector.SelectSelectorMode.DROPDOWN,
            translation_key=CONF_LIMIT_UNIT,
        )
    )
    for key, fallback in (
        (CONF_UPPER_LIMIT, DEFAULT_UPPER_LIMIT),
        (CONF_LOWER_LIMIT, DEFAULT_LOWER_LIMIT),
    ):
        fields[
            vol.Optional(key, default=defaults.get(key, fallback))
        ] = selector.NumberSelector(
            selector.NumberSelectorConfig(
                min=0,
                max=10_000_000,
                step=0.1,
                mode=selector.NumberSelectorMode.BOX,
            )
        )

    return vol.Schema(fields)


def _validate_geometry(data: dict[str, Any]) -> dict[str, str]:
    """Return form errors for a merged tank configuration."""
    errors: dict[str, str] = {}
    geometry = TankGeometry.from_mapping(data)

    if geometry.shape is None:
        errors[CONF_TANK_SHAPE] = "invalid_shape"
        return errors

    upper, lower = geometry.upper_limit, geometry.lower_limit
    if limit_is_set(upper) and limit_is_set(lower) and lower >= upper:
        errors["base"] = "invalid_limits"

    try:
        full = full_volume_liters(geometry)
    except GeometryError:
        errors["base"] = "invalid_geometry"
        return errors

    if full is None or full <= 0:
        errors["base"] = "invalid_geometry"
    elif geometry.capacity_l and geometry.capacity_l > full * 1.05:
        _LOGGER.warning(
            "Configured capacity %.0f L exceeds geometric volume %.0f L; "
            "fill percentage will never reach 100",
            geometry.capacity_l,
            full,
        )

    return errors


class TankLevelMonitorConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Tank Level Monitor."""

    VERSION = 1

    def __init__(self) -> None:
        """Initialize the flow."""
        self._data: dict[str, Any] = {}

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Handle the tank identity step."""
        errors = {}

        if user_input is not None:
            # Validate that the sensor exists
            if not self.hass.states.get(user_input[CONF_DISTANCE_SENSOR]):
                errors[CONF_DISTANCE_SENSOR] = "sensor_not_found"
            else:
                await self.async_set_unique_id(user_input[CONF_DISTANCE_SENSOR])
                self._abort_if_unique_id_configured()

                self._data = dict(user_input)
                return await self.async_step_geometry()

        return self.async_show_form(
            step_id="user",
            data_schema=_build_user_schema(user_input or {}),
            errors=errors,
        )

    async def async_step_geometry(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Handle the shape-specific geometry step."""
        errors: dict[str, str] = {}
        shape = self._data.get(CONF_TANK_SHAPE, SHAPE_CYLINDER)

        if user_input is not None:
            data = {**self._data, **user_input}
            errors = _validate_geometry(data)
            if not errors:
                return self.async_create_entry(
                    title=data.get(CONF_TANK_NAME, DEFAULT_TANK_NAME),
                    data=data,
                )

        return self.async_show_form(
            step_id="geometry",
            data_schema=_build_geometry_schema(shape, user_input or {}),
            errors=errors,
        )

    async def async_step_import(self, import_config: dict[str, Any]) -> FlowResult:
        """Handle import from configuration.yaml."""
        await self.async_set_unique_id(import_config[CONF_DISTANCE_SENSOR])
        self._abort_if_unique_id_configured()

        errors = _validate_geometry(import_config)
        if errors:
            _LOGGER.error(
                "Invalid YAML configuration for %s: %s",
                import_config.get(CONF_TANK_NAME),
                errors,
            )
            return self.async_abort(reason="invalid_config")

        return self.async_create_entry(
            title=import_config.get(CONF_TANK_NAME, DEFAULT_TANK_NAME),
            data=import_config,
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> config_entries.OptionsFlow:
        """Get the options flow for this handler."""
        return TankLevelMonitorOptionsFlow()


class TankLevelMonitorOptionsFlow(config_entries.OptionsFlow):
    """Handle options flow for Tank Level Monitor."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Manage the geometry and limits."""
        current = {**self.config_entry.data, **self.config_entry.options}
        shape = current.get(CONF_TANK_SHAPE, SHAPE_CYLINDER)
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = _validate_geometry({**current, **user_input})
            if not errors:
                return self.async_create_entry(title="", data=user_input)

        return self.async_show_form(
            step_id="init",
            data_schema=_build_geometry_schema(shape, user_input or current),
            errors=errors,
        )
