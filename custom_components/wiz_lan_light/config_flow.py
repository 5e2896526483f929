"""Config flow for WiZ LAN Light integration."""

from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.const import CONF_HOST, CONF_NAME, CONF_PORT
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError

from .api import WizConnectionError, WizLight
from .const import DEFAULT_PORT, DOMAIN

_LOGGER = logging.getLogger(__name__)

STEP_USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_HOST): str,
        vol.Optional(CONF_PORT, default=DEFAULT_PORT): vol.All(
            vol.Coerce(int), vol.Range(min=1, max=65535)
        ),
        vol.Optional(CONF_NAME, default="WiZ Light"): str,
    }
)


async def validate_input(hass: HomeAssistant, data: dict[str, Any]) -> dict[str, Any]:
    """Validate the user input.

    Data has the keys from STEP_USER_DATA_SCHEMA with values provided by the user.

    The bulb only answers setPilot, which would change its state, so the
    address is checked by opening the UDP channel rather than by a round trip.
    """
    host = data[CONF_HOST].strip()
    port = data.get(CONF_PORT, DEFAULT_PORT)

    try:
        light = await hass.async_add_executor_job(WizLight, host, port)
    except WizConnectionError as err:
        _LOGGER.debug("Cannot open channel to %s:%d: %s", host, port, err)
        raise CannotConnect from err
    light.close()

    return {
        "title": data.get(CONF_NAME, f"WiZ Light ({host})"),
        "host": host,
        "port": port,
    }


class WizLanLightConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for WiZ LAN Light."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle manual entry of the bulb address."""
        errors: dict[str, str] = {}

        if user_input is not None:
            try:
                info = await validate_input(self.hass, user_input)
            except CannotConnect:
                errors["base"] = "cannot_connect"
            except Exception:
                _LOGGER.exception("Unexpected exception")
                errors["base"] = "unknown"
            else:
                await self.async_set_unique_id(f"{info['host']}:{info['port']}")
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=info["title"],
                    data={
                        CONF_HOST: info["host"],
                        CONF_PORT: info["port"],
                        CONF_NAME: info["title"],
                    },
                )

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )


class CannotConnect(HomeAssistantError):
    """Error to indicate we cannot connect."""
