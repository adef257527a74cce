"""Core data structures and typing protocols for the Hue controller."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar, Protocol

from pydantic import BaseModel, ConfigDict, Field

from hue_controller.const import MAX_BRIGHTNESS, MAX_HUE, MAX_SATURATION

if TYPE_CHECKING:
    from hue_controller.state_update import StateUpdate


class ColorMode(StrEnum):
    """Colour mode reported by the bridge for a light or group action."""

    HS = "hs"
    XY = "xy"
    CT = "ct"
    NONE = "none"


class AlertMode(StrEnum):
    """Bridge alert values. Channel tokens are the upper-cased member names."""

    NONE = "none"
    SELECT = "select"
    LSELECT = "lselect"

    @property
    def token(self) -> str:
        return self.name

    @classmethod
    def from_token(cls, token: str) -> AlertMode | None:
        """Map an alert channel token (case-insensitive) to a mode, None if unknown."""
        return cls.__members__.get(token.strip().upper())


class Effect(StrEnum):
    NONE = "none"
    COLORLOOP = "colorloop"


class ChannelKind(StrEnum):
    """Controllable attribute of a group."""

    COLOR_TEMPERATURE = "color_temperature"
    BRIGHTNESS = "brightness"
    SWITCH = "switch"
    COLOR = "color"
    ALERT = "alert"
    EFFECT = "effect"


class CommandKind(StrEnum):
    ON_OFF = "on_off"
    PERCENT = "percent"
    INCREASE_DECREASE = "increase_decrease"
    STRING = "string"
    HSB = "hsb"


class Direction(StrEnum):
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"


@dataclass(frozen=True, slots=True)
class OnOffCommand:
    kind: ClassVar[CommandKind] = CommandKind.ON_OFF
    on: bool


@dataclass(frozen=True, slots=True)
class PercentCommand:
    """Absolute percentage, 0-100."""

    kind: ClassVar[CommandKind] = CommandKind.PERCENT
    value: float

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 100:
            msg = f"Percent value must be within 0-100, got {self.value}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class IncreaseDecreaseCommand:
    kind: ClassVar[CommandKind] = CommandKind.INCREASE_DECREASE
    direction: Direction


@dataclass(frozen=True, slots=True)
class StringCommand:
    kind: ClassVar[CommandKind] = CommandKind.STRING
    value: str


@dataclass(frozen=True, slots=True)
class HSBCommand:
    """Colour as hue (0-360 degrees), saturation and brightness (0-100 percent)."""

    kind: ClassVar[CommandKind] = CommandKind.HSB
    hue: float
    saturation: float
    brightness: float

    def __post_init__(self) -> None:
        if not 0 <= self.hue <= 360:
            msg = f"Hue must be within 0-360, got {self.hue}"
            raise ValueError(msg)
        if not 0 <= self.saturation <= 100 or not 0 <= self.brightness <= 100:
            msg = f"Saturation and brightness must be within 0-100, got {self.saturation}/{self.brightness}"
            raise ValueError(msg)


type Command = OnOffCommand | PercentCommand | IncreaseDecreaseCommand | StringCommand | HSBCommand


@dataclass(frozen=True, slots=True)
class HSBValue:
    """Published colour channel value."""

    hue: int
    saturation: int
    brightness: int


type ChannelValue = HSBValue | int | str | None


class DeviceState(BaseModel):
    """Snapshot of a light or group action as reported by the bridge.

    Read-only for the core; a fresh snapshot arrives with every notification.
    """

    model_config = ConfigDict(frozen=True)

    on: bool = False
    brightness: int = Field(default=0, ge=0, le=MAX_BRIGHTNESS)
    color_temperature: int | None = None
    color_mode: ColorMode = ColorMode.NONE
    hue: int = Field(default=0, ge=0, le=MAX_HUE)
    saturation: int = Field(default=0, ge=0, le=MAX_SATURATION)
    xy: tuple[float, float] | None = None
    alert: AlertMode | None = None
    effect: Effect | None = None


class BridgeClientProtocol(Protocol):
    """Bridge collaborator that owns polling and transport."""

    def get_device_state(self, device_id: str) -> DeviceState | None:
        """Return the last polled state for a light or group, None if unknown."""
        ...

    async def send_state_update(self, device_id: str, update: StateUpdate) -> None:
        """Send a state patch to the bridge. Retries are the bridge's concern."""
        ...


class DeviceStateListenerProtocol(Protocol):
    """Receiver of bridge notifications for lights and groups."""

    async def on_device_state_changed(self, device_id: str, state: DeviceState) -> None: ...

    async def on_device_added(self, device_id: str, state: DeviceState) -> None: ...

    async def on_device_removed(self, device_id: str) -> None: ...


class StatePublisherProtocol(Protocol):
    """Host/UI layer receiving derived channel values."""

    async def publish(self, device_id: str, channel: ChannelKind, value: ChannelValue) -> None:
        """Publish a channel value. ``None`` means the channel is undefined."""
        ...
