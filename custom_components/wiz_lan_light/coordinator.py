"""DataUpdateCoordinator for WiZ LAN Light."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, replace
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .api import WizColors, WizError, WizLight
from .const import DOMAIN, EFFECT_PULSE, MAX_DIMMING

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class WizLightState:
    """Last state sent to the light."""

    on: bool = False
    dimming: int = MAX_DIMMING
    colors: WizColors = WizColors(white=255)
    effect: str | None = None


class WizLanLightCoordinator(DataUpdateCoordinator[WizLightState]):
    """Coordinator serializing commands to a WiZ light.

    setPilot is the only command used, so the device is never polled and
    state is tracked locally. Every command stops a running pulse before it
    is sent so only one call is in flight on the socket.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        light: WizLight,
        name: str,
    ) -> None:
        """Initialize the coordinator.

        Args:
            hass: Home Assistant instance.
            entry: The config entry owning the light.
            light: Connected WizLight for the device.
            name: Name of the device for logging.
        """
        super().__init__(
            hass,
            _LOGGER,
            config_entry=entry,
            name=f"{DOMAIN}_{name}",
            update_interval=None,
        )
        self.light = light
        self._local_state = WizLightState()
        self._pulse_stop: asyncio.Event | None = None
        self._pulse_task: asyncio.Task[None] | None = None
        self._lock = asyncio.Lock()

    @property
    def local_state(self) -> WizLightState:
        """Return the locally tracked state."""
        return self._local_state

    @property
    def pulsing(self) -> bool:
        """Return True while the pulse effect is running."""
        return self._pulse_task is not None and not self._pulse_task.done()

    async def _async_update_data(self) -> WizLightState:
        """Return the locally tracked state."""
        return self._local_state

    async def async_turn_on(self) -> None:
        """Turn the light on."""
        async with self._lock:
            await self._async_stop_pulse()
            await self._async_command(self.light.turn_on())
            self._update_local_state(on=True, effect=None)

    async def async_turn_off(self) -> None:
        """Turn the light off."""
        async with self._lock:
            await self._async_stop_pulse()
            await self._async_command(self.light.turn_off())
            self._update_local_state(on=False, effect=None)

    async def async_set_color(self, colors: WizColors, dimming: int) -> None:
        """Set color and dimming.

        Args:
            colors: Channel intensities.
            dimming: Brightness percentage.
        """
        async with self._lock:
            await self._async_stop_pulse()
            await self._async_command(self.light.set_color(colors, dimming))
            self._update_local_state(
                on=True, colors=colors, dimming=dimming, effect=None
            )

    async def async_start_pulse(self, colors: WizColors) -> None:
        """Start pulsing in the background with the given colors."""
        async with self._lock:
            await self._async_stop_pulse()
            self._pulse_stop = asyncio.Event()
            self._pulse_task = self.hass.async_create_background_task(
                self.light.pulse(self._pulse_stop, colors),
                name=f"{self.name} pulse",
            )
            self._update_local_state(on=True, colors=colors, effect=EFFECT_PULSE)

    async def async_stop_pulse(self) -> None:
        """Stop the pulse effect and wait for its current step to finish."""
        async with self._lock:
            await self._async_stop_pulse()

    async def async_shutdown(self) -> None:
        """Stop pulsing and release the connection."""
        await super().async_shutdown()
        try:
            await self.async_stop_pulse()
        finally:
            self.light.close()

    async def _async_stop_pulse(self) -> None:
        # Callers hold self._lock.
        if self._pulse_task is None or self._pulse_stop is None:
            return
        task = self._pulse_task
        self._pulse_stop.set()
        self._pulse_task = None
        self._pulse_stop = None
        await task

    async def _async_command(self, command: Awaitable[None]) -> None:
        try:
            await command
        except WizError as err:
            raise HomeAssistantError(str(err)) from err

    def _update_local_state(self, **changes: Any) -> None:
        self._local_state = replace(self._local_state, **changes)
        self.async_set_updated_data(self._local_state)
