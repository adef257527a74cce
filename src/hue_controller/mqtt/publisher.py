"""Publish derived group channel values to MQTT."""

from __future__ import annotations

import asyncio

import aiomqtt

from hue_controller.const import HUE_MQTT_HOST, HUE_MQTT_PORT, HUE_TOPIC
from hue_controller.logging_abstraction import get_logger
from hue_controller.structs import ChannelKind, ChannelValue, HSBValue

__all__ = ["UNDEF_PAYLOAD", "MQTTStatePublisher", "encode_channel_value"]

logger = get_logger(__name__)

UNDEF_PAYLOAD = "UNDEF"


def encode_channel_value(value: ChannelValue) -> bytes:
    """Render a channel value as an MQTT payload; HSB as ``h,s,b``."""
    if value is None:
        return UNDEF_PAYLOAD.encode()
    if isinstance(value, HSBValue):
        return f"{value.hue},{value.saturation},{value.brightness}".encode()
    return str(value).encode()


def state_topic(topic: str, group_id: str, channel: ChannelKind) -> str:
    return f"{topic}/status/{group_id}/{channel.value}"


class MQTTStatePublisher:
    """StatePublisher backed by an aiomqtt client. Values are retained."""

    lp: str = "mqtt_publisher:"

    def __init__(
        self,
        client: aiomqtt.Client | None = None,
        topic: str = HUE_TOPIC,
        hostname: str = HUE_MQTT_HOST,
        port: int = HUE_MQTT_PORT,
    ) -> None:
        self.topic: str = topic
        self.client: aiomqtt.Client = client or aiomqtt.Client(hostname=hostname, port=port)
        self._connected: bool = client is not None

    @property
    def is_connected(self) -> bool:
        return self._connected

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

    async def publish(self, device_id: str, channel: ChannelKind, value: ChannelValue) -> None:
        lp = f"{self.lp}publish:"
        if not self._connected:
            logger.debug("%s Not connected, dropping %s=%s for group %s", lp, channel, value, device_id)
            return
        topic = state_topic(self.topic, device_id, channel)
        try:
            await self.client.publish(topic, encode_channel_value(value), qos=0, retain=True)
        except aiomqtt.MqttError as mqtt_err:
            logger.warning("%s [MqttError] -> %s", lp, mqtt_err)
            self._connected = False
        except asyncio.CancelledError:
            logger.warning("%s Publish to %s cancelled", lp, topic)
            raise
        else:
            logger.debug("%s %s -> %s", lp, topic, value)
