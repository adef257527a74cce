"""Partial target state sent to a light or group on the bridge."""

from __future__ import annotations

from typing import Self, override

from hue_controller.structs import AlertMode, Effect

__all__ = ["StateUpdate", "StateUpdateFrozenError", "create_brightness_state_update"]


class StateUpdateFrozenError(RuntimeError):
    """Raised when a StateUpdate is modified after being handed to the bridge."""


class StateUpdate:
    """Chainable builder for a bridge state patch.

    Only fields that were set are rendered by :meth:`to_payload`. Once
    :meth:`freeze` is called the update is read-only.
    """

    def __init__(self) -> None:
        self.on: bool | None = None
        self.brightness: int | None = None
        self.color_temperature: int | None = None
        self.hue: int | None = None
        self.saturation: int | None = None
        self.xy: tuple[float, float] | None = None
        self.transition_time: int | None = None
        self.alert: AlertMode | None = None
        self.effect: Effect | None = None
        self._frozen: bool = False

    @override
    def __setattr__(self, name: str, value: object) -> None:
        if getattr(self, "_frozen", False):
            msg = f"Cannot set '{name}' on a frozen StateUpdate"
            raise StateUpdateFrozenError(msg)
        super().__setattr__(name, value)

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StateUpdate):
            return NotImplemented
        return self.to_payload() == other.to_payload()

    __hash__ = None  # type: ignore[assignment]

    @override
    def __repr__(self) -> str:
        return f"<StateUpdate {self.to_payload()}>"

    @property
    def frozen(self) -> bool:
        return self._frozen

    def is_empty(self) -> bool:
        return not self.to_payload()

    def turn_on(self) -> Self:
        self.on = True
        return self

    def turn_off(self) -> Self:
        self.on = False
        self.brightness = None
        return self

    def set_on(self, on: bool) -> Self:
        return self.turn_on() if on else self.turn_off()

    def set_brightness(self, brightness: int) -> Self:
        """Set brightness; 0 turns the target off instead."""
        if brightness <= 0:
            return self.turn_off()
        self.brightness = brightness
        return self

    def set_color_temperature(self, mirek: int) -> Self:
        self.color_temperature = mirek
        return self

    def set_hs(self, hue: int, saturation: int) -> Self:
        self.hue = hue
        self.saturation = saturation
        self.xy = None
        return self

    def set_xy(self, x: float, y: float) -> Self:
        self.xy = (x, y)
        self.hue = None
        self.saturation = None
        return self

    def set_transition_time(self, transition_time: int) -> Self:
        """Transition time in bridge units (multiples of 100ms)."""
        self.transition_time = transition_time
        return self

    def set_alert(self, alert: AlertMode) -> Self:
        self.alert = alert
        return self

    def set_effect(self, effect: Effect) -> Self:
        self.effect = effect
        return self

    def freeze(self) -> Self:
        object.__setattr__(self, "_frozen", True)
        return self

    def to_payload(self) -> dict[str, object]:
        """Render the bridge field names of every field that was set."""
        fields: dict[str, object | None] = {
            "on": self.on,
            "bri": self.brightness,
            "ct": self.color_temperature,
            "hue": self.hue,
            "sat": self.saturation,
            "xy": list(self.xy) if self.xy is not None else None,
            "transitiontime": self.transition_time,
            "alert": self.alert.value if self.alert is not None else None,
            "effect": self.effect.value if self.effect is not None else None,
        }
        return {key: value for key, value in fields.items() if value is not None}


def create_brightness_state_update(current_brightness: int, new_brightness: int) -> StateUpdate:
    """Build the update for moving from ``current_brightness`` to ``new_brightness``.

    Reaching 0 switches off; leaving 0 switches on as well as setting brightness.
    """
    update = StateUpdate()
    if new_brightness == 0:
        return update.turn_off()
    update.set_brightness(new_brightness)
    if current_brightness == 0:
        update.turn_on()
    return update
