"""Conversions between channel values and bridge light state.

Channel side: percentages (0-100), HSB with hue in degrees, alert tokens.
Bridge side: brightness 0-255, mirek, hue 0-65535, saturation 0-254, CIE xy.
"""

from __future__ import annotations

import colorsys
import math

from hue_controller.const import (
    BRIGHTNESS_FACTOR,
    COLOR_TEMPERATURE_FACTOR,
    HUE_FACTOR,
    MAX_COLOR_TEMPERATURE,
    MAX_HUE,
    MAX_SATURATION,
    MIN_COLOR_TEMPERATURE,
    SATURATION_FACTOR,
)
from hue_controller.state_update import StateUpdate
from hue_controller.structs import AlertMode, ColorMode, DeviceState, Effect, HSBCommand, HSBValue

PERCENT_MIN = 0
PERCENT_MAX = 100


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def to_on_off_state(on: bool) -> StateUpdate:
    return StateUpdate().set_on(on)


def to_brightness_state(percent: float) -> StateUpdate:
    """Percent brightness to an update.

    Only exactly 0% switches off. A percentage too small to reach bridge
    brightness 1 still switches on, without a brightness field.
    """
    if percent == 0:
        return StateUpdate().turn_off()
    update = StateUpdate().turn_on()
    brightness = math.floor(percent * BRIGHTNESS_FACTOR)
    if brightness > 0:
        update.set_brightness(brightness)
    return update


def to_color_temperature_state(percent: float) -> StateUpdate:
    """Percent along the warm/cold range (0% = coldest) to a mirek update."""
    mirek = round(percent * COLOR_TEMPERATURE_FACTOR + MIN_COLOR_TEMPERATURE)
    return StateUpdate().set_color_temperature(int(_clamp(mirek, MIN_COLOR_TEMPERATURE, MAX_COLOR_TEMPERATURE)))


def hsb_to_xy(hue: float, saturation: float) -> tuple[float, float]:
    """Convert hue (degrees) and saturation (percent) to CIE 1931 xy with Hue's wide-gamut matrix.

    Chromaticity is taken at full brightness; brightness travels separately as ``bri``.
    """
    red, green, blue = colorsys.hsv_to_rgb(hue / 360.0, saturation / 100.0, 1.0)

    def linear(channel: float) -> float:
        return ((channel + 0.055) / 1.055) ** 2.4 if channel > 0.04045 else channel / 12.92

    red, green, blue = linear(red), linear(green), linear(blue)
    x_big = red * 0.664511 + green * 0.154324 + blue * 0.162028
    y_big = red * 0.283881 + green * 0.668433 + blue * 0.047685
    z_big = red * 0.000088 + green * 0.072310 + blue * 0.986039
    total = x_big + y_big + z_big
    return round(x_big / total, 4), round(y_big / total, 4)


def xy_to_hue_saturation(x: float, y: float) -> tuple[float, float]:
    """Inverse of :func:`hsb_to_xy` at full brightness, returning (degrees, percent)."""
    if y == 0:
        return 0.0, 0.0
    y_big = 1.0
    x_big = (y_big / y) * x
    z_big = (y_big / y) * (1.0 - x - y)
    red = x_big * 1.656492 - y_big * 0.354851 - z_big * 0.255038
    green = -x_big * 0.707196 + y_big * 1.655397 + z_big * 0.036152
    blue = x_big * 0.051713 - y_big * 0.121364 + z_big * 1.011530

    peak = max(red, green, blue)
    if peak > 1.0:
        red, green, blue = red / peak, green / peak, blue / peak

    def companded(channel: float) -> float:
        channel = 12.92 * channel if channel <= 0.0031308 else 1.055 * channel ** (1.0 / 2.4) - 0.055
        return _clamp(channel, 0.0, 1.0)

    hue, saturation, _ = colorsys.rgb_to_hsv(companded(red), companded(green), companded(blue))
    return hue * 360.0, saturation * 100.0


def to_color_state(command: HSBCommand, device_state: DeviceState | None) -> StateUpdate:
    """Colour update; XY-only targets get xy, everything else hue/sat.

    Brightness is only included when positive. Zero brightness is the caller's
    concern (it means "off").
    """
    update = StateUpdate()
    if device_state is not None and device_state.color_mode == ColorMode.XY:
        update.set_xy(*hsb_to_xy(command.hue, command.saturation))
    else:
        hue = int(_clamp(round(command.hue * HUE_FACTOR), 0, MAX_HUE))
        saturation = int(_clamp(round(command.saturation * SATURATION_FACTOR), 0, MAX_SATURATION))
        update.set_hs(hue, saturation)
    brightness = math.floor(command.brightness * BRIGHTNESS_FACTOR)
    if brightness > 0:
        update.set_brightness(brightness)
    return update


def to_alert_state(token: str) -> StateUpdate | None:
    """Alert token (NONE, SELECT, LSELECT) to an update, None when unrecognized."""
    mode = AlertMode.from_token(token)
    if mode is None:
        return None
    return StateUpdate().set_alert(mode)


def to_effect_state(on: bool) -> StateUpdate:
    return StateUpdate().set_effect(Effect.COLORLOOP if on else Effect.NONE)


def to_brightness_percent(state: DeviceState) -> int:
    return int(_clamp(round(state.brightness / BRIGHTNESS_FACTOR), PERCENT_MIN, PERCENT_MAX))


def to_color_temperature_percent(state: DeviceState) -> int | None:
    if state.color_temperature is None:
        return None
    percent = round((state.color_temperature - MIN_COLOR_TEMPERATURE) / COLOR_TEMPERATURE_FACTOR)
    return int(_clamp(percent, PERCENT_MIN, PERCENT_MAX))


def to_hsb_value(state: DeviceState) -> HSBValue:
    """Colour channel value for a bridge state; hue and saturation come from xy in XY mode."""
    if state.color_mode == ColorMode.XY and state.xy is not None:
        hue, saturation = xy_to_hue_saturation(*state.xy)
    else:
        hue = state.hue / HUE_FACTOR
        saturation = state.saturation / SATURATION_FACTOR
    return HSBValue(
        hue=int(_clamp(round(hue), 0, 360)),
        saturation=int(_clamp(round(saturation), PERCENT_MIN, PERCENT_MAX)),
        brightness=to_brightness_percent(state),
    )


def to_alert_token(state: DeviceState) -> str | None:
    return state.alert.token if state.alert is not None else None
