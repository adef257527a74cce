"""MQTT command routing.

Topics look like ``<topic>/set/<group_id>/<channel>``; the payload is parsed
into a typed command and handed to the group's handler.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING

import aiomqtt

from hue_controller.const import HUE_TOPIC
from hue_controller.correlation import correlation_context, generate_correlation_id
from hue_controller.logging_abstraction import get_logger
from hue_controller.structs import (
    ChannelKind,
    Command,
    Direction,
    HSBCommand,
    IncreaseDecreaseCommand,
    OnOffCommand,
    PercentCommand,
    StringCommand,
)

if TYPE_CHECKING:
    from hue_controller.devices.group import HueGroupHandler
    from hue_controller.state_update import StateUpdate

__all__ = ["CommandRouter", "parse_command"]

logger = get_logger(__name__)


def parse_command(payload: str) -> Command:
    """Parse an MQTT payload into a command.

    ``ON``/``OFF``, ``INCREASE``/``DECREASE``, ``h,s,b`` and plain numbers
    map to their typed commands; anything else is a string command.

    Raises:
        ValueError: If a numeric or HSB payload is out of range

    """
    text = payload.strip()
    upper = text.upper()
    if upper in ("ON", "OFF"):
        return OnOffCommand(on=upper == "ON")
    if upper in Direction.__members__:
        return IncreaseDecreaseCommand(direction=Direction(upper))
    parts = text.split(",")
    if len(parts) == 3:
        try:
            hue, saturation, brightness = (float(part) for part in parts)
        except ValueError:
            return StringCommand(value=text)
        return HSBCommand(hue=hue, saturation=saturation, brightness=brightness)
    try:
        percent = float(text)
    except ValueError:
        return StringCommand(value=text)
    return PercentCommand(value=percent)


class CommandRouter:
    """Route MQTT set-topics to group handlers."""

    lp: str = "CommandRouter:"

    def __init__(self, handlers: Mapping[str, HueGroupHandler], topic: str = HUE_TOPIC) -> None:
        self.handlers: Mapping[str, HueGroupHandler] = handlers
        self.topic: str = topic

    @property
    def subscription(self) -> str:
        return f"{self.topic}/set/#"

    def _parse_topic(self, topic: str, lp: str) -> tuple[HueGroupHandler, ChannelKind] | None:
        parts = topic.split("/")
        if len(parts) != 4 or parts[0] != self.topic or parts[1] != "set":
            logger.debug("%s Ignoring malformed topic: %s", lp, topic)
            return None
        group_id, channel_name = parts[2], parts[3]
        handler = self.handlers.get(group_id)
        if handler is None:
            logger.warning("%s Group ID %s not found in config", lp, group_id)
            return None
        try:
            channel = ChannelKind(channel_name)
        except ValueError:
            logger.warning("%s Unknown channel '%s' on %s", lp, channel_name, topic)
            return None
        return handler, channel

    async def route(self, topic: str, payload: bytes | str) -> StateUpdate | None:
        """Dispatch one message; returns the update the handler sent, if any."""
        lp = f"{self.lp}route:"
        target = self._parse_topic(topic, lp)
        if target is None:
            return None
        handler, channel = target

        text = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes) else payload
        try:
            command = parse_command(text)
        except ValueError as e:
            logger.warning("%s Rejected payload '%s' on %s: %s", lp, text, topic, e)
            return None

        logger.debug("%s %s -> %s %s", lp, topic, channel, command)
        return await handler.handle_command(channel, command)

    async def start_receiver_task(self, client: aiomqtt.Client) -> None:
        """Subscribe and route messages until cancelled."""
        lp = f"{self.lp}rcv:"
        await client.subscribe(self.subscription, qos=0)
        logger.info("%s Subscribed to %s", lp, self.subscription)
        try:
            async for message in client.messages:
                payload = message.payload
                if not isinstance(payload, (bytes, str)):
                    logger.debug("%s Ignoring non-text payload on %s", lp, message.topic)
                    continue
                with correlation_context(generate_correlation_id()):
                    try:
                        _ = await self.route(str(message.topic), payload)
                    except Exception:
                        logger.exception("%s Command failed on %s", lp, message.topic)
        except asyncio.CancelledError:
            logger.debug("%s MQTT receiver task cancelled, propagating...", lp)
            raise
        except aiomqtt.MqttError as msg_err:
            logger.warning("%s MQTT error: %s", lp, msg_err)
            raise
