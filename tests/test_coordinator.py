import asyncio

import pytest
from homeassistant.exceptions import HomeAssistantError

from custom_components.wiz_lan_light.api import WizColors
from custom_components.wiz_lan_light.const import EFFECT_PULSE

RED = WizColors(red=255)
GREEN = WizColors(green=255)


def live_pulse_tasks(coordinator) -> list[asyncio.Task]:
    return [task for task in coordinator.hass.tasks if not task.done()]


class TestCommands:
    @pytest.mark.asyncio
    async def test_turn_on_updates_local_state(self, fake_device, coordinator):
        await coordinator.async_turn_on()

        assert coordinator.data.on is True
        assert fake_device.payloads == [{"method": "setPilot", "params": {"state": True}}]

    @pytest.mark.asyncio
    async def test_set_color_updates_local_state(self, fake_device, coordinator):
        await coordinator.async_set_color(RED, 40)

        assert coordinator.local_state.colors == RED
        assert coordinator.local_state.dimming == 40
        assert coordinator.local_state.effect is None
        assert fake_device.payloads[-1]["params"] == {"state": True, "r": 255, "dimming": 40}

    @pytest.mark.asyncio
    async def test_failure_becomes_home_assistant_error(self, fake_device, coordinator):
        fake_device.reply = b"garbage"

        with pytest.raises(HomeAssistantError, match="unable to turn off light"):
            await coordinator.async_turn_off()

        assert coordinator.local_state.on is False
        assert coordinator.data is None


class TestPulse:
    @pytest.mark.asyncio
    async def test_start_pulse(self, fake_device, coordinator):
        await coordinator.async_start_pulse(RED)
        await fake_device.wait_for_requests(1)

        assert coordinator.pulsing
        assert coordinator.local_state.effect == EFFECT_PULSE
        assert fake_device.dimmings[0] == 10

    @pytest.mark.asyncio
    async def test_set_color_stops_pulse_before_sending(self, fake_device, coordinator):
        await coordinator.async_start_pulse(RED)
        await fake_device.wait_for_requests(1)

        await coordinator.async_set_color(GREEN, 50)

        assert not coordinator.pulsing
        assert live_pulse_tasks(coordinator) == []
        assert fake_device.payloads[-1]["params"] == {"state": True, "g": 255, "dimming": 50}
        sent = len(fake_device.received)
        await asyncio.sleep(0.3)
        assert len(fake_device.received) == sent

    @pytest.mark.asyncio
    async def test_turn_off_stops_pulse(self, fake_device, coordinator):
        await coordinator.async_start_pulse(RED)
        await fake_device.wait_for_requests(1)

        await coordinator.async_turn_off()

        assert not coordinator.pulsing
        assert coordinator.local_state.effect is None
        assert fake_device.payloads[-1]["params"] == {"state": False}

    @pytest.mark.asyncio
    async def test_concurrent_starts_leave_one_pulse(self, fake_device, coordinator):
        await coordinator.async_start_pulse(RED)
        await fake_device.wait_for_requests(1)

        await asyncio.gather(
            coordinator.async_start_pulse(GREEN),
            coordinator.async_start_pulse(RED),
        )

        assert len(live_pulse_tasks(coordinator)) == 1

        await coordinator.async_stop_pulse()
        assert live_pulse_tasks(coordinator) == []

    @pytest.mark.asyncio
    async def test_concurrent_commands_do_not_overlap(self, fake_device, coordinator):
        await asyncio.gather(
            coordinator.async_set_color(RED, 20),
            coordinator.async_turn_on(),
            coordinator.async_set_color(GREEN, 30),
        )

        assert len(fake_device.received) == 3
        assert coordinator.local_state.dimming == 30

    @pytest.mark.asyncio
    async def test_shutdown_stops_pulse_and_closes_light(self, fake_device, coordinator):
        await coordinator.async_start_pulse(RED)
        await fake_device.wait_for_requests(1)

        await coordinator.async_shutdown()

        assert coordinator.light.closed
        assert live_pulse_tasks(coordinator) == []
