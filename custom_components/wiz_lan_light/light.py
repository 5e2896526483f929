"""Light entity for WiZ LAN Light integration."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.light import (
    ATTR_BRIGHTNESS,
    ATTR_EFFECT,
    ATTR_RGBW_COLOR,
    ColorMode,
    LightEntity,
    LightEntityFeature,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_NAME
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .api import WizColors
from .const import DOMAIN, EFFECT_PULSE, MAX_DIMMING, MIN_DIMMING
from .coordinator import WizLanLightCoordinator

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up WiZ LAN Light from a config entry."""
    coordinator: WizLanLightCoordinator = hass.data[DOMAIN][entry.entry_id]

    async_add_entities([WizLanLight(coordinator, entry)])


def to_dimming(ha_brightness: int) -> int:
    """Convert HA brightness (0-255) to WiZ dimming (10-100)."""
    return max(MIN_DIMMING, min(MAX_DIMMING, round(ha_brightness / 255 * MAX_DIMMING)))


class WizLanLight(CoordinatorEntity[WizLanLightCoordinator], LightEntity):
    """Representation of a WiZ LAN Light."""

    _attr_has_entity_name = True
    _attr_name = None
    _attr_supported_color_modes = {ColorMode.RGBW}
    _attr_color_mode = ColorMode.RGBW
    _attr_supported_features = LightEntityFeature.EFFECT
    _attr_effect_list = [EFFECT_PULSE]
    _attr_assumed_state = True

    def __init__(
        self,
        coordinator: WizLanLightCoordinator,
        entry: ConfigEntry,
    ) -> None:
        """Initialize the light entity.

        Args:
            coordinator: The data update coordinator.
            entry: The config entry.
        """
        super().__init__(coordinator)
        self._host = entry.data[CONF_HOST]
        self._attr_unique_id = entry.entry_id
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.unique_id or self._host)},
            name=entry.data.get(CONF_NAME, f"WiZ Light ({self._host})"),
            manufacturer="WiZ",
        )

    @property
    def is_on(self) -> bool | None:
        """Return true if light is on."""
        if self.coordinator.data is None:
            return None
        return self.coordinator.data.on

    @property
    def brightness(self) -> int | None:
        """Return the brightness of the light (0-255)."""
        if self.coordinator.data is None:
            return None
        return round(self.coordinator.data.dimming / MAX_DIMMING * 255)

    @property
    def rgbw_color(self) -> tuple[int, int, int, int] | None:
        """Return the RGBW color value."""
        if self.coordinator.data is None:
            return None
        colors = self.coordinator.data.colors
        return (colors.red, colors.green, colors.blue, colors.white)

    @property
    def effect(self) -> str | None:
        """Return the running effect."""
        if self.coordinator.data is None:
            return None
        return self.coordinator.data.effect

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Turn the light on."""
        state = self.coordinator.local_state
        colors = state.colors
        dimming = state.dimming

        if ATTR_RGBW_COLOR in kwargs:
            red, green, blue, white = kwargs[ATTR_RGBW_COLOR]
            colors = WizColors(white=white, red=red, blue=blue, green=green)

        if ATTR_BRIGHTNESS in kwargs:
            dimming = to_dimming(kwargs[ATTR_BRIGHTNESS])

        if kwargs.get(ATTR_EFFECT) == EFFECT_PULSE:
            await self.coordinator.async_start_pulse(colors)
        elif ATTR_RGBW_COLOR in kwargs or ATTR_BRIGHTNESS in kwargs:
            await self.coordinator.async_set_color(colors, dimming)
        else:
            await self.coordinator.async_turn_on()

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Turn the light off."""
        await self.coordinator.async_turn_off()

    @callback
    def _handle_coordinator_update(self) -> None:
        """Handle updated data from the coordinator."""
        self.async_write_ha_state()
