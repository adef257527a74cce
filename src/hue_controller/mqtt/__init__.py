"""MQTT surface for Hue group handlers.

- bridge.py: bridge collaborator talking to a Hue bridge gateway
- command_routing.py: set-topic parsing and routing to handlers
- publisher.py: retained state publishing of derived channel values
"""

from .bridge import MQTTBridgeClient, parse_bridge_state
from .command_routing import CommandRouter, parse_command
from .publisher import MQTTStatePublisher, encode_channel_value

__all__ = [
    "CommandRouter",
    "MQTTBridgeClient",
    "MQTTStatePublisher",
    "encode_channel_value",
    "parse_bridge_state",
    "parse_command",
]
