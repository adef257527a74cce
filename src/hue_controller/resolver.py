"""Resolve INCREASE/DECREASE commands to absolute brightness and colour temperature."""

from __future__ import annotations

from typing import TYPE_CHECKING

from hue_controller.const import (
    BRIGHTNESS_STEP,
    COLOR_TEMPERATURE_STEP,
    MAX_BRIGHTNESS,
    MAX_COLOR_TEMPERATURE,
    MIN_BRIGHTNESS,
    MIN_COLOR_TEMPERATURE,
)
from hue_controller.structs import DeviceState, Direction

if TYPE_CHECKING:
    from hue_controller.devices.session import CommandSession

__all__ = [
    "current_brightness",
    "current_color_temperature",
    "resolve_brightness_change",
    "resolve_color_temp_change",
]


def _step(direction: Direction, current: int, step: int, low: int, high: int) -> int:
    target = current + step if direction == Direction.INCREASE else current - step
    return max(low, min(high, target))


def resolve_brightness_change(direction: Direction, current: int) -> int:
    """Move brightness one step, clamped to 0-255."""
    return _step(direction, current, BRIGHTNESS_STEP, MIN_BRIGHTNESS, MAX_BRIGHTNESS)


def resolve_color_temp_change(direction: Direction, current: int) -> int:
    """Move colour temperature one step in mirek, clamped to the supported range."""
    return _step(direction, current, COLOR_TEMPERATURE_STEP, MIN_COLOR_TEMPERATURE, MAX_COLOR_TEMPERATURE)


def current_brightness(session: CommandSession, device_state: DeviceState | None) -> int:
    """Brightness to step from.

    Last sent value first, then the bridge snapshot. An off device (or no
    snapshot at all) counts as 0.
    """
    if session.last_sent_brightness is not None:
        return session.last_sent_brightness
    if device_state is None or not device_state.on:
        return 0
    return device_state.brightness


def current_color_temperature(session: CommandSession, device_state: DeviceState | None) -> int:
    """Colour temperature to step from; 0 when nothing is known, which clamps to the range minimum."""
    if session.last_sent_color_temperature is not None:
        return session.last_sent_color_temperature
    if device_state is None or device_state.color_temperature is None:
        return 0
    return device_state.color_temperature
