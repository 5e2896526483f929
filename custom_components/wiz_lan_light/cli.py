"""Pulse a WiZ bulb from the command line until interrupted."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys

from .api import WizColors, WizConnectionError, WizError, WizLight, WizLightConfig
from .const import DEFAULT_HOST, DEFAULT_PORT, TIMEOUT_COMMAND

_LOGGER = logging.getLogger(__name__)

PULSE_COLORS = WizColors(white=0, red=255, blue=0, green=100)


def build_parser() -> argparse.ArgumentParser:
    """Build the wizctl argument parser."""
    parser = argparse.ArgumentParser(
        prog="wizctl", description="Pulse a WiZ light until interrupted"
    )
    parser.add_argument(
        "--addr", default=DEFAULT_HOST, help="address of the wiz light device"
    )
    parser.add_argument(
        "--port", type=int, default=DEFAULT_PORT, help="port of the wiz light device"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=TIMEOUT_COMMAND,
        help="seconds to wait for each reply",
    )
    parser.add_argument("--debug", action="store_true", help="Debug logging")
    return parser


async def run(addr: str, port: int, timeout: float, stop: asyncio.Event) -> int:
    """Pulse the light until stop is set, then turn it off.

    Returns:
        Process exit status.
    """
    try:
        light = WizLight(addr, port, WizLightConfig(timeout=timeout, logger=_LOGGER))
    except WizConnectionError as err:
        _LOGGER.critical("%s", err)
        return 1

    async with light:
        await light.pulse(stop, PULSE_COLORS)

        try:
            await light.turn_off()
        except WizError as err:
            _LOGGER.critical("%s", err)
            return 1

    _LOGGER.info("received interrupt, shutting down")
    return 0


async def _run_until_signal(args: argparse.Namespace) -> int:
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    return await run(args.addr, args.port, args.timeout, stop)


def main(argv: list[str] | None = None) -> int:
    """Run wizctl and return its exit status."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )

    return asyncio.run(_run_until_signal(args))


if __name__ == "__main__":
    sys.exit(main())
