"""UDP API implementation for WiZ LAN Light."""

from __future__ import annotations

import asyncio
import json
import logging
import socket
from dataclasses import dataclass
from typing import Any

from .const import (
    DEFAULT_PORT,
    MAX_REPLY_SIZE,
    METHOD_SET_PILOT,
    PULSE_HIGH,
    PULSE_LOW,
    TIMEOUT_COMMAND,
)

_LOGGER = logging.getLogger(__name__)


class WizError(Exception):
    """Base class for errors talking to a WiZ device."""


class WizConnectionError(WizError):
    """The device address could not be resolved or the socket opened."""


class WizEncodingError(WizError):
    """A command could not be serialized."""


class WizTransportError(WizError):
    """Writing to or reading from the UDP channel failed."""


class WizTimeoutError(WizError):
    """No reply arrived before the deadline."""


class WizDecodingError(WizError):
    """The reply datagram is not a valid pilot reply."""


@dataclass(frozen=True)
class WizColors:
    """Channel intensities, 0-255 each. Not validated."""

    white: int = 0
    red: int = 0
    blue: int = 0
    green: int = 0


@dataclass(frozen=True)
class WizCommand:
    """A setPilot command.

    Optional channels and dimming set to 0 are left out of the payload, so a
    channel can't be explicitly requested at 0.
    """

    state: bool
    white: int = 0
    red: int = 0
    blue: int = 0
    green: int = 0
    dimming: int = 0
    method: str = METHOD_SET_PILOT

    def as_dict(self) -> dict[str, Any]:
        """Return the wire representation of the command."""
        params: dict[str, Any] = {"state": self.state}
        for key, value in (
            ("w", self.white),
            ("r", self.red),
            ("b", self.blue),
            ("g", self.green),
            ("dimming", self.dimming),
        ):
            if value:
                params[key] = value
        return {"method": self.method, "params": params}


@dataclass(frozen=True)
class WizReply:
    """Reply sent back by the device."""

    method: str
    env: str
    success: bool


@dataclass(frozen=True)
class WizLightConfig:
    """Settings for a WizLight.

    Attributes:
        timeout: Deadline in seconds covering one send and its reply.
        logger: Logger receiving the light's log events.
    """

    timeout: float = TIMEOUT_COMMAND
    logger: logging.Logger = _LOGGER


def encode_command(command: WizCommand) -> bytes:
    """Serialize a command to compact JSON.

    Raises:
        WizEncodingError: If the command holds values JSON can't represent.
    """
    try:
        return json.dumps(
            command.as_dict(), separators=(",", ":"), allow_nan=False
        ).encode("utf-8")
    except (TypeError, ValueError) as err:
        raise WizEncodingError(f"unable to marshal message: {err}") from err


def _field(data: dict[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, kind):
        raise WizDecodingError(
            f"unable to unmarshal message: {key!r} is not a {kind.__name__}"
        )
    return value


def decode_reply(data: bytes) -> WizReply:
    """Parse a reply datagram.

    Missing fields decode to empty values; anything that isn't a JSON object
    with correctly typed fields is rejected.

    Raises:
        WizDecodingError: If the payload can't be parsed.
    """
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as err:
        raise WizDecodingError(f"unable to unmarshal message: {err}") from err

    if not isinstance(payload, dict):
        raise WizDecodingError("unable to unmarshal message: reply is not an object")

    result = _field(payload, "result", dict, {})
    return WizReply(
        method=_field(payload, "method", str, ""),
        env=_field(payload, "env", str, ""),
        success=_field(result, "success", bool, False),
    )


class WizTransport:
    """A UDP socket connected to a single WiZ device.

    Not safe for concurrent use: each call shares the socket and its
    deadline, so callers must serialize send_message.
    """

    def __init__(
        self,
        host: str,
        port: int,
        timeout: float = TIMEOUT_COMMAND,
        logger: logging.Logger = _LOGGER,
    ) -> None:
        """Resolve the address and connect the socket.

        Args:
            host: Hostname or IP address of the device.
            port: UDP port of the device.
            timeout: Deadline in seconds for one send and its reply.
            logger: Logger for debug events.

        Raises:
            WizConnectionError: If the address can't be resolved or the
                socket can't be opened.
        """
        self._host = host
        self._port = port
        self._timeout = timeout
        self._log = logger
        self._sock: socket.socket | None = None

        try:
            family, type_, proto, _, address = socket.getaddrinfo(
                host, port, type=socket.SOCK_DGRAM
            )[0]
        except (socket.gaierror, UnicodeError, OverflowError) as err:
            raise WizConnectionError(
                f"error dialing light at {host}:{port}: {err}"
            ) from err

        try:
            sock = socket.socket(family, type_, proto)
        except OSError as err:
            raise WizConnectionError(
                f"error dialing light at {host}:{port}: {err}"
            ) from err

        try:
            sock.setblocking(False)
            sock.connect(address)
        except (OSError, OverflowError) as err:
            sock.close()
            raise WizConnectionError(
                f"error dialing light at {host}:{port}: {err}"
            ) from err
        self._sock = sock

    @property
    def host(self) -> str:
        """Return the device host."""
        return self._host

    @property
    def port(self) -> int:
        """Return the device port."""
        return self._port

    @property
    def closed(self) -> bool:
        """Return True once the socket has been released."""
        return self._sock is None

    async def send_message(self, command: WizCommand) -> WizReply:
        """Send a command and wait for the single reply datagram.

        One deadline covers both the write and the read. Nothing is retried.

        Args:
            command: Command to send.

        Returns:
            The decoded reply.

        Raises:
            WizEncodingError: If the command can't be serialized.
            WizTransportError: If the socket is closed or the write/read fails.
            WizTimeoutError: If the deadline passes before the reply arrives.
            WizDecodingError: If the reply can't be parsed.
        """
        data = encode_command(command)
        if self._sock is None:
            raise WizTransportError("unable to write to connection: connection is closed")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._timeout

        try:
            await asyncio.wait_for(
                loop.sock_sendall(self._sock, data), timeout=deadline - loop.time()
            )
        except asyncio.TimeoutError as err:
            raise WizTimeoutError(
                f"unable to write to connection: timed out after {self._timeout}s"
            ) from err
        except OSError as err:
            raise WizTransportError(f"unable to write to connection: {err}") from err

        self._log.debug(
            "Written %d bytes to %s:%d", len(data), self._host, self._port
        )

        try:
            response = await asyncio.wait_for(
                loop.sock_recv(self._sock, MAX_REPLY_SIZE),
                timeout=deadline - loop.time(),
            )
        except asyncio.TimeoutError as err:
            raise WizTimeoutError(
                f"unable to read from udp connection: timed out after {self._timeout}s"
            ) from err
        except OSError as err:
            raise WizTransportError(
                f"unable to read from udp connection: {err}"
            ) from err

        reply = decode_reply(response)
        self._log.debug(
            "Message received from %s: method=%s success=%s",
            self._host,
            reply.method,
            reply.success,
        )
        return reply

    def close(self) -> None:
        """Release the socket. Safe to call more than once."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None


class WizLight:
    """A WiZ bulb controlled over its LAN UDP API."""

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        config: WizLightConfig | None = None,
    ) -> None:
        """Connect to the light.

        Args:
            host: IP address or hostname of the bulb.
            port: UDP port of the bulb.
            config: Timeout and logger; defaults apply when omitted.

        Raises:
            WizConnectionError: If the channel can't be opened.
        """
        self._config = config or WizLightConfig()
        self._log = self._config.logger
        self._transport = WizTransport(
            host, port, self._config.timeout, self._log
        )

    @property
    def host(self) -> str:
        """Return the host of the light."""
        return self._transport.host

    @property
    def port(self) -> int:
        """Return the UDP port of the light."""
        return self._transport.port

    @property
    def config(self) -> WizLightConfig:
        """Return the light configuration."""
        return self._config

    @property
    def closed(self) -> bool:
        """Return True once the connection has been released."""
        return self._transport.closed

    async def __aenter__(self) -> WizLight:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the connection."""
        self._transport.close()

    async def send_message(self, command: WizCommand) -> WizReply:
        """Send a raw command to the light."""
        return await self._transport.send_message(command)

    async def turn_on(self) -> None:
        """Turn on the light.

        Raises:
            WizError: Same class as the transport failure, with context added.
        """
        await self._send(WizCommand(state=True), "turn on light")

    async def turn_off(self) -> None:
        """Turn off the light."""
        await self._send(WizCommand(state=False), "turn off light")

    async def set_color(self, colors: WizColors, dimming: int) -> None:
        """Set the channel values and dimming, turning the light on.

        Args:
            colors: Channel intensities.
            dimming: Brightness percentage (0-100).
        """
        await self._send(
            WizCommand(
                state=True,
                white=colors.white,
                red=colors.red,
                blue=colors.blue,
                green=colors.green,
                dimming=dimming,
            ),
            "set light color",
        )

    async def pulse(self, stop: asyncio.Event, colors: WizColors) -> None:
        """Blink between low and high brightness until stop is set.

        The event is checked once per step, before sending, so a step that
        has started always finishes its send and hold. Failed steps are
        logged and the loop carries on.

        Args:
            stop: Set to end the loop.
            colors: Channel intensities used for every step.
        """
        self._log.debug("Pulsing %s", self.host)
        current, following = PULSE_LOW, PULSE_HIGH
        while not stop.is_set():
            dimming, hold = current
            try:
                await self.set_color(colors, dimming)
            except WizError as err:
                self._log.error("%s", err)
            await asyncio.sleep(hold)
            current, following = following, current
        self._log.debug("Pulse on %s stopped", self.host)

    async def _send(self, command: WizCommand, action: str) -> WizReply:
        # Any reply that decodes counts as acceptance; success isn't checked.
        try:
            return await self._transport.send_message(command)
        except WizError as err:
            raise type(err)(f"unable to {action}: {err}") from err
