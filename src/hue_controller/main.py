from __future__ import annotations

import argparse
import asyncio
import logging
import signal
from functools import partial
from pathlib import Path

import uvloop

from hue_controller.config import GroupHandlerConfig, load_handler_configs
from hue_controller.const import (
    BRIDGE_RECEIVER_TASK_NAME,
    COMMAND_RECEIVER_TASK_NAME,
    HUE_CONFIG_FILE_PATH,
    HUE_DEBUG,
    HUE_TOPIC,
    HUE_VERSION,
)
from hue_controller.correlation import correlation_context
from hue_controller.devices.group import HueGroupHandler
from hue_controller.logging_abstraction import get_logger
from hue_controller.mqtt.bridge import MQTTBridgeClient
from hue_controller.mqtt.command_routing import CommandRouter
from hue_controller.mqtt.publisher import MQTTStatePublisher

logger = get_logger(__name__)


class HueController:
    """Wires group handlers to the bridge gateway and the MQTT command/state topics."""

    lp: str = "HueController:"

    def __init__(
        self,
        configs: list[GroupHandlerConfig],
        bridge: MQTTBridgeClient,
        publisher: MQTTStatePublisher,
        topic: str = HUE_TOPIC,
    ) -> None:
        self.bridge: MQTTBridgeClient = bridge
        self.publisher: MQTTStatePublisher = publisher
        self.handlers: dict[str, HueGroupHandler] = {
            config.group_id: HueGroupHandler.from_config(config, bridge, publisher) for config in configs
        }
        self.router: CommandRouter = CommandRouter(self.handlers, topic)
        self.tasks: list[asyncio.Task[None]] = []

    async def start(self) -> None:
        """Attach every handler, connect to the broker and start both receivers.

        Raises:
            ConnectionError: If the publisher or the bridge client cannot connect

        """
        lp = f"{self.lp}start:"
        for handler in self.handlers.values():
            _ = handler.attach()
            self.bridge.add_listener(handler)

        if not await self.publisher.connect():
            msg = "State publisher could not connect to the MQTT broker"
            raise ConnectionError(msg)
        if not await self.bridge.connect():
            msg = "Bridge client could not connect to the MQTT broker"
            raise ConnectionError(msg)

        self.tasks = [
            asyncio.create_task(self.router.start_receiver_task(self.publisher.client), name=COMMAND_RECEIVER_TASK_NAME),
            asyncio.create_task(self.bridge.start_receiver_task(), name=BRIDGE_RECEIVER_TASK_NAME),
        ]
        logger.info("%s Started", lp, extra={"group_count": len(self.handlers)})

    async def stop(self) -> None:
        """Cancel the receivers, close every handler and disconnect."""
        lp = f"{self.lp}stop:"
        for task in self.tasks:
            if not task.done():
                logger.debug("%s Cancelling task: %s", lp, task.get_name())
                _ = task.cancel()
        _ = await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks = []

        for handler in self.handlers.values():
            await handler.close()
        await self.bridge.disconnect()
        await self.publisher.disconnect()
        logger.info("%s Stopped", lp)

    async def run(self, stop_event: asyncio.Event) -> None:
        """Run until ``stop_event`` is set or a receiver task ends."""
        lp = f"{self.lp}run:"
        stop_waiter = asyncio.create_task(stop_event.wait(), name="hue_controller_stop")
        try:
            await self.start()
            done, _ = await asyncio.wait([*self.tasks, stop_waiter], return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                if task is stop_waiter or task.cancelled():
                    continue
                exc = task.exception()
                if exc is not None:
                    logger.error("%s Task %s stopped: %s", lp, task.get_name(), exc)
        finally:
            _ = stop_waiter.cancel()
            await self.stop()


def _signal_handler(signum: int, stop_event: asyncio.Event) -> None:
    logger.info("Intercepted signal: %s (%s)", signal.Signals(signum).name, signum)
    stop_event.set()


def _enable_debug_logging() -> None:
    for name, existing in list(logging.root.manager.loggerDict.items()):
        if name.startswith("hue_controller") and isinstance(existing, logging.Logger) and existing.handlers:
            get_logger(name).set_level(logging.DEBUG)


async def _run(configs: list[GroupHandlerConfig]) -> None:
    controller = HueController(configs, MQTTBridgeClient(), MQTTStatePublisher())
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, partial(_signal_handler, signum, stop_event))
    logger.debug("Signal handlers configured for SIGINT & SIGTERM")
    await controller.run(stop_event)


def parse_cli(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Hue Controller")
    _ = parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path(HUE_CONFIG_FILE_PATH),
        help="Path to the YAML group configuration",
    )
    _ = parser.add_argument("-D", "--debug", action="store_true", help="Enable debug mode")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for Hue Controller."""
    with correlation_context():
        logger.info("Starting Hue Controller", extra={"version": HUE_VERSION})
        args = parse_cli(argv)

        if args.debug or HUE_DEBUG:
            _enable_debug_logging()
            logger.info("Debug logging enabled")

        try:
            configs = load_handler_configs(args.config)
        except (FileNotFoundError, ValueError) as e:
            logger.error("Configuration error: %s", e)
            return 1

        try:
            uvloop.run(_run(configs))
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received, shutting down...")
        except Exception:
            logger.exception("Fatal error in main loop")
            return 1
        else:
            logger.info("Hue Controller stopped gracefully")
        finally:
            logger.info("Hue Controller shutdown complete")
        return 0
