"""The WiZ LAN Light integration."""

from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_NAME, CONF_PORT, Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from .api import WizConnectionError, WizLight
from .const import DEFAULT_PORT, DOMAIN
from .coordinator import WizLanLightCoordinator

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [Platform.LIGHT]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up WiZ LAN Light from a config entry."""
    host = entry.data[CONF_HOST]
    port = entry.data.get(CONF_PORT, DEFAULT_PORT)
    name = entry.data.get(CONF_NAME, f"WiZ Light ({host})")

    _LOGGER.debug("Setting up WiZ LAN Light at %s:%d", host, port)

    try:
        light = await hass.async_add_executor_job(WizLight, host, port)
    except WizConnectionError as err:
        raise ConfigEntryNotReady(str(err)) from err

    coordinator = WizLanLightCoordinator(hass, entry, light, name)

    try:
        await coordinator.async_config_entry_first_refresh()
    except BaseException:
        light.close()
        raise

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = coordinator

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    if unload_ok := await hass.config_entries.async_unload_platforms(entry, PLATFORMS):
        coordinator: WizLanLightCoordinator = hass.data[DOMAIN].pop(entry.entry_id)
        await coordinator.async_shutdown()

    return unload_ok
