"""Bridge collaborator for a Hue bridge gateway that mirrors groups over MQTT.

The gateway publishes each group's action as a JSON object (bridge field
names) on ``<topic>/<group_id>/state`` and applies the JSON patches it
receives on ``<topic>/<group_id>/set``. An empty retained state message
means the group is gone.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import TYPE_CHECKING

import aiomqtt
from pydantic import ValidationError

from hue_controller.const import HUE_BRIDGE_TOPIC, HUE_MQTT_HOST, HUE_MQTT_PORT
from hue_controller.correlation import correlation_context, generate_correlation_id
from hue_controller.logging_abstraction import get_logger
from hue_controller.structs import ColorMode, DeviceState

if TYPE_CHECKING:
    from hue_controller.state_update import StateUpdate
    from hue_controller.structs import DeviceStateListenerProtocol

__all__ = ["MQTTBridgeClient", "parse_bridge_state"]

logger = get_logger(__name__)


def parse_bridge_state(data: Mapping[str, object]) -> DeviceState:
    """Map a bridge ``state``/``action`` object onto a DeviceState.

    Raises:
        ValidationError: If a field is out of range or of the wrong type

    """
    return DeviceState.model_validate(
        {
            "on": data.get("on", False),
            "brightness": data.get("bri", 0),
            "color_temperature": data.get("ct"),
            "color_mode": data.get("colormode", ColorMode.NONE),
            "hue": data.get("hue", 0),
            "saturation": data.get("sat", 0),
            "xy": data.get("xy"),
            "alert": data.get("alert"),
            "effect": data.get("effect"),
        }
    )


class MQTTBridgeClient:
    """BridgeClient backed by a gateway on the MQTT broker.

    Keeps the last reported state per group and notifies listeners (the group
    handlers) of additions, changes and removals.
    """

    lp: str = "mqtt_bridge:"

    def __init__(
        self,
        client: aiomqtt.Client | None = None,
        topic: str = HUE_BRIDGE_TOPIC,
        hostname: str = HUE_MQTT_HOST,
        port: int = HUE_MQTT_PORT,
    ) -> None:
        self.topic: str = topic
        self.client: aiomqtt.Client = client or aiomqtt.Client(hostname=hostname, port=port)
        self._connected: bool = client is not None
        self.states: dict[str, DeviceState] = {}
        self.listeners: list[DeviceStateListenerProtocol] = []

    @property
    def subscription(self) -> str:
        return f"{self.topic}/+/state"

    def add_listener(self, listener: DeviceStateListenerProtocol) -> None:
        self.listeners.append(listener)

    async def connect(self) -> bool:
        lp = f"{self.lp}connect:"
        try:
            _ = await self.client.__aenter__()
        except aiomqtt.MqttError:
            logger.exception("%s Connection failed [MqttError]", lp)
            self._connected = False
            return False
        self._connected = True
        logger.info("%s Connected to MQTT broker", lp)
        return True

    async def disconnect(self) -> None:
        if not self._connected:
            return
        self._connected = False
        try:
            await self.client.__aexit__(None, None, None)
        except aiomqtt.MqttError as e:
            logger.warning("%s Disconnect failed [MqttError] -> %s", self.lp, e)

    def get_device_state(self, device_id: str) -> DeviceState | None:
        return self.states.get(device_id)

    async def send_state_update(self, device_id: str, update: StateUpdate) -> None:
        """Publish ``update`` to the group's set-topic. MQTT errors propagate to the caller."""
        topic = f"{self.topic}/{device_id}/set"
        await self.client.publish(topic, json.dumps(update.to_payload()).encode(), qos=1)
        logger.debug("%s %s -> %s", self.lp, topic, update)

    async def handle_message(self, topic: str, payload: bytes | str) -> None:
        """Apply one state message and notify listeners."""
        lp = f"{self.lp}handle_message:"
        parts = topic.split("/")
        if len(parts) != 3 or parts[0] != self.topic or parts[2] != "state":
            logger.debug("%s Ignoring topic: %s", lp, topic)
            return
        group_id = parts[1]

        text = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes) else payload
        if not text.strip():
            if self.states.pop(group_id, None) is not None:
                logger.info("%s Group %s removed", lp, group_id)
                for listener in self.listeners:
                    await listener.on_device_removed(group_id)
            return

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("%s Invalid JSON state for group %s: %s", lp, group_id, e)
            return
        if not isinstance(data, dict):
            logger.warning("%s State for group %s is not a JSON object", lp, group_id)
            return
        try:
            state = parse_bridge_state(data)
        except ValidationError as e:
            logger.warning("%s Invalid state for group %s: %s", lp, group_id, e)
            return

        is_new = group_id not in self.states
        self.states[group_id] = state
        for listener in self.listeners:
            if is_new:
                await listener.on_device_added(group_id, state)
            else:
                await listener.on_device_state_changed(group_id, state)

    async def start_receiver_task(self) -> None:
        """Subscribe to group states and apply them until cancelled."""
        lp = f"{self.lp}rcv:"
        await self.client.subscribe(self.subscription, qos=1)
        logger.info("%s Subscribed to %s", lp, self.subscription)
        try:
            async for message in self.client.messages:
                payload = message.payload
                if payload is None:
                    payload = b""
                elif isinstance(payload, bytearray):
                    payload = bytes(payload)
                elif not isinstance(payload, (bytes, str)):
                    payload = str(payload)
                with correlation_context(generate_correlation_id()):
                    try:
                        await self.handle_message(str(message.topic), payload)
                    except Exception:
                        logger.exception("%s State update failed on %s", lp, message.topic)
        except asyncio.CancelledError:
            logger.debug("%s Bridge receiver task cancelled, propagating...", lp)
            raise
        except aiomqtt.MqttError as msg_err:
            logger.warning("%s MQTT error: %s", lp, msg_err)
            raise
