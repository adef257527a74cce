"""
Shared fixtures for unit tests.

Provides mock bridge and publisher collaborators plus common group states.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from hue_controller.devices.group import HueGroupHandler
from hue_controller.devices.session import CommandSession
from hue_controller.structs import ColorMode, DeviceState

GROUP_ID = "3"


@pytest.fixture
def off_state():
    """Group that is off, no colour temperature known."""
    return DeviceState(on=False, brightness=0, color_mode=ColorMode.NONE)


@pytest.fixture
def ct_state():
    """Group that is on in colour-temperature mode."""
    return DeviceState(on=True, brightness=127, color_temperature=300, color_mode=ColorMode.CT)


@pytest.fixture
def mock_bridge(off_state):
    """
    Mock bridge collaborator.

    get_device_state returns ``off_state`` until the test reassigns return_value.
    """
    bridge = MagicMock()
    bridge.get_device_state = MagicMock(return_value=off_state)
    bridge.send_state_update = AsyncMock()
    return bridge


@pytest.fixture
def mock_publisher():
    """Mock state publisher recording every published channel value."""
    publisher = MagicMock()
    publisher.publish = AsyncMock()
    return publisher


@pytest.fixture
def session():
    return CommandSession()


@pytest.fixture
def handler(mock_bridge, mock_publisher):
    """Attached handler for GROUP_ID; detached again after the test."""
    group_handler = HueGroupHandler(GROUP_ID, mock_bridge, mock_publisher, name="Living Room")
    group_handler.attach()
    yield group_handler
    group_handler.detach()


def published(publisher: MagicMock) -> list[tuple]:
    """Return (channel, value) pairs in publish order."""
    return [(c.args[1], c.args[2]) for c in publisher.publish.await_args_list]
