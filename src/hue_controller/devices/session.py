"""Per-group cache of what this controller last sent to the bridge."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hue_controller.alert import DelayedAlertRestorer
    from hue_controller.state_update import StateUpdate


@dataclass
class CommandSession:
    """Mutable state owned by a single group handler.

    ``last_sent_*`` mirror the most recent command so relative commands do not
    read a bridge value that is one poll interval behind. They are dropped as
    soon as the bridge reports a new state.
    """

    last_sent_color_temperature: int | None = None
    last_sent_brightness: int | None = None
    transition_time_override: int | None = None
    alert_restorer: DelayedAlertRestorer | None = field(default=None, repr=False)

    def invalidate(self) -> None:
        """Forget last-sent values; the bridge is authoritative again."""
        self.last_sent_color_temperature = None
        self.last_sent_brightness = None

    def record_sent(self, update: StateUpdate) -> None:
        if update.brightness is not None:
            self.last_sent_brightness = update.brightness
        if update.color_temperature is not None:
            self.last_sent_color_temperature = update.color_temperature

    def close(self) -> None:
        """Cancel any pending alert restore and drop all cached values."""
        if self.alert_restorer is not None:
            self.alert_restorer.cancel_pending()
        self.alert_restorer = None
        self.invalidate()
        self.transition_time_override = None
