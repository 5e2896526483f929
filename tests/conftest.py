import asyncio
import json
import time
from unittest.mock import MagicMock

import pytest_asyncio

from custom_components.wiz_lan_light.api import WizLight, WizLightConfig
from custom_components.wiz_lan_light.coordinator import WizLanLightCoordinator


REPLY_OK = b'{"method":"setPilot","env":"test","result":{"success":true}}'


class FakeWizDevice(asyncio.DatagramProtocol):
    """UDP endpoint on localhost that records requests and answers them."""

    def __init__(self) -> None:
        self.reply: bytes | None = REPLY_OK
        self.received: list[tuple[float, bytes]] = []
        self.transport: asyncio.DatagramTransport | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport

    def datagram_received(self, data: bytes, addr) -> None:
        self.received.append((time.monotonic(), data))
        if self.reply is not None:
            self.transport.sendto(self.reply, addr)

    @property
    def port(self) -> int:
        return self.transport.get_extra_info("sockname")[1]

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(data) for _, data in self.received]

    @property
    def dimmings(self) -> list[int | None]:
        return [payload["params"].get("dimming") for payload in self.payloads]

    async def wait_for_requests(self, count: int, timeout: float = 5.0) -> None:
        async def poll() -> None:
            while len(self.received) < count:
                await asyncio.sleep(0.01)

        await asyncio.wait_for(poll(), timeout=timeout)


@pytest_asyncio.fixture
async def fake_device():
    loop = asyncio.get_running_loop()
    transport, protocol = await loop.create_datagram_endpoint(
        FakeWizDevice, local_addr=("127.0.0.1", 0)
    )
    yield protocol
    transport.close()


@pytest_asyncio.fixture
async def light(fake_device):
    light = WizLight("127.0.0.1", fake_device.port, WizLightConfig(timeout=0.5))
    yield light
    light.close()


class FakeHass:
    """The parts of HomeAssistant the integration touches outside setup."""

    def __init__(self) -> None:
        self.tasks: list[asyncio.Task] = []

    async def async_add_executor_job(self, target, *args):
        return target(*args)

    def async_create_background_task(self, target, name, **kwargs) -> asyncio.Task:
        task = asyncio.create_task(target, name=name)
        self.tasks.append(task)
        return task


@pytest_asyncio.fixture
async def coordinator(light):
    entry = MagicMock()
    entry.entry_id = "entry-1"
    entry.unique_id = "127.0.0.1:38899"
    entry.data = {"host": "127.0.0.1", "port": 38899, "name": "Desk"}
    coordinator = WizLanLightCoordinator(FakeHass(), entry, light, "Desk")
    yield coordinator
    await coordinator.async_shutdown()
