"""Translate a (channel, command) pair into a bridge StateUpdate.

Every channel kind accepts a fixed set of command kinds; anything else
produces no update. Callers decide how to report a rejected command.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from hue_controller import converter
from hue_controller.resolver import (
    current_brightness,
    current_color_temperature,
    resolve_brightness_change,
    resolve_color_temp_change,
)
from hue_controller.state_update import StateUpdate, create_brightness_state_update
from hue_controller.structs import (
    ChannelKind,
    Command,
    DeviceState,
    Direction,
    HSBCommand,
    IncreaseDecreaseCommand,
    OnOffCommand,
    PercentCommand,
    StringCommand,
)

if TYPE_CHECKING:
    from hue_controller.devices.session import CommandSession

__all__ = ["SUPPORTED_COMMANDS", "dispatch"]

SUPPORTED_COMMANDS: dict[ChannelKind, tuple[type, ...]] = {
    ChannelKind.COLOR_TEMPERATURE: (PercentCommand, OnOffCommand, IncreaseDecreaseCommand),
    ChannelKind.BRIGHTNESS: (PercentCommand, OnOffCommand, IncreaseDecreaseCommand),
    ChannelKind.SWITCH: (OnOffCommand,),
    ChannelKind.COLOR: (HSBCommand, PercentCommand, OnOffCommand, IncreaseDecreaseCommand),
    ChannelKind.ALERT: (StringCommand,),
    ChannelKind.EFFECT: (OnOffCommand,),
}


def _brightness_step(direction: Direction, device_state: DeviceState | None, session: CommandSession) -> StateUpdate:
    current = current_brightness(session, device_state)
    return create_brightness_state_update(current, resolve_brightness_change(direction, current))


def _color_temperature_step(
    direction: Direction,
    device_state: DeviceState | None,
    session: CommandSession,
) -> StateUpdate:
    current = current_color_temperature(session, device_state)
    return StateUpdate().set_color_temperature(resolve_color_temp_change(direction, current))


def _translate(
    channel: ChannelKind,
    command: Command,
    device_state: DeviceState | None,
    session: CommandSession,
) -> StateUpdate | None:
    match channel, command:
        case ChannelKind.COLOR_TEMPERATURE, PercentCommand(value=percent):
            return converter.to_color_temperature_state(percent)
        case ChannelKind.COLOR_TEMPERATURE, IncreaseDecreaseCommand(direction=direction):
            return _color_temperature_step(direction, device_state, session)
        case ChannelKind.BRIGHTNESS | ChannelKind.COLOR, PercentCommand(value=percent):
            return converter.to_brightness_state(percent)
        case ChannelKind.BRIGHTNESS | ChannelKind.COLOR, IncreaseDecreaseCommand(direction=direction):
            return _brightness_step(direction, device_state, session)
        case (
            ChannelKind.COLOR_TEMPERATURE | ChannelKind.BRIGHTNESS | ChannelKind.SWITCH | ChannelKind.COLOR,
            OnOffCommand(on=on),
        ):
            return converter.to_on_off_state(on)
        case ChannelKind.COLOR, HSBCommand() as hsb:
            if int(hsb.brightness) == 0:
                return converter.to_on_off_state(False)
            return converter.to_color_state(hsb, device_state)
        case ChannelKind.ALERT, StringCommand(value=token):
            return converter.to_alert_state(token)
        case ChannelKind.EFFECT, OnOffCommand(on=on):
            return converter.to_effect_state(on)
        case _:
            return None


def dispatch(
    channel: ChannelKind,
    command: Command,
    device_state: DeviceState | None,
    session: CommandSession,
) -> StateUpdate | None:
    """Build the update for ``command`` on ``channel`` and record it in ``session``.

    Brightness and switch updates carry the last sent colour temperature so a
    group that was off picks it up when it comes back on. The session's
    transition time override is applied to every update.

    Args:
        channel: Target channel kind
        command: Typed command received for that channel
        device_state: Latest bridge snapshot, None if the bridge has none yet
        session: The group's command session; updated with what is being sent

    Returns:
        The update to send, or None when the command does not apply to the channel

    """
    update = _translate(channel, command, device_state, session)
    if update is None or update.is_empty():
        return None

    if channel in (ChannelKind.BRIGHTNESS, ChannelKind.SWITCH) and session.last_sent_color_temperature is not None:
        update.set_color_temperature(session.last_sent_color_temperature)
    if session.transition_time_override is not None:
        update.set_transition_time(session.transition_time_override)

    session.record_sent(update)
    return update
