"""Command and state handling for a single Hue light group."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING

from pydantic import ValidationError

from hue_controller import converter
from hue_controller.alert import DelayedAlertRestorer
from hue_controller.config import GroupHandlerConfig, TransitionTimeUpdate
from hue_controller.correlation import correlation_context
from hue_controller.devices.session import CommandSession
from hue_controller.dispatcher import SUPPORTED_COMMANDS, dispatch
from hue_controller.logging_abstraction import get_logger
from hue_controller.structs import AlertMode, ChannelKind, ColorMode, HSBValue, StringCommand

if TYPE_CHECKING:
    from hue_controller.state_update import StateUpdate
    from hue_controller.structs import BridgeClientProtocol, Command, DeviceState, StatePublisherProtocol


logger = get_logger(__name__)


class HueGroupHandler:
    """Translate channel commands for one group and publish its bridge state.

    Commands, bridge notifications and alert resets for the group all run
    under one lock; different groups never share state.
    """

    lp: str = "HueGroupHandler:"

    def __init__(
        self,
        group_id: str,
        bridge: BridgeClientProtocol,
        publisher: StatePublisherProtocol,
        name: str | None = None,
        transition_time: int | None = None,
    ) -> None:
        """Initialize a handler; call :meth:`attach` before sending commands.

        Args:
            group_id: Bridge group ID
            bridge: Collaborator providing group state and accepting updates
            publisher: Receiver of derived channel values
            name: Display name used in log prefixes
            transition_time: Transition time applied to every update, in bridge units

        """
        self.group_id: str = group_id
        self.name: str = name or f"Group {group_id}"
        self.bridge: BridgeClientProtocol = bridge
        self.publisher: StatePublisherProtocol = publisher
        self.transition_time: int | None = transition_time
        self.session: CommandSession | None = None
        self._lock: asyncio.Lock = asyncio.Lock()
        self.lp = f"HueGroupHandler:{self.name}({group_id}):"

    @classmethod
    def from_config(
        cls,
        config: GroupHandlerConfig,
        bridge: BridgeClientProtocol,
        publisher: StatePublisherProtocol,
    ) -> HueGroupHandler:
        return cls(config.group_id, bridge, publisher, name=config.name, transition_time=config.transition_time)

    @property
    def attached(self) -> bool:
        return self.session is not None

    def attach(self) -> CommandSession:
        """Create the command session. Attaching twice keeps the existing one."""
        if self.session is None:
            self.session = CommandSession(
                transition_time_override=self.transition_time,
                alert_restorer=DelayedAlertRestorer(self._restore_alert, name=self.group_id),
            )
            logger.debug("%s Attached", self.lp)
        return self.session

    def detach(self) -> None:
        """Tear down the session, cancelling any pending alert reset."""
        if self.session is None:
            return
        self.session.close()
        self.session = None
        logger.debug("%s Detached", self.lp)

    async def close(self) -> None:
        """Let an alert reset that is already running finish, then detach."""
        session = self.session
        if session is not None and session.alert_restorer is not None:
            await session.alert_restorer.wait_restored()
        self.detach()

    async def handle_command(self, channel: ChannelKind, command: Command) -> StateUpdate | None:
        """Translate ``command`` for ``channel`` and send the result to the bridge.

        Returns:
            The update that was sent, or None if nothing was sent

        """
        lp = f"{self.lp}handle_command:"
        with correlation_context():
            async with self._lock:
                session = self.session
                if session is None:
                    logger.warning("%s Handler is not attached, dropping %s for %s", lp, command, channel)
                    return None

                device_state = self.bridge.get_device_state(self.group_id)
                if device_state is None:
                    logger.debug("%s Group not known on bridge, cannot handle %s", lp, command)
                    return None

                update = dispatch(channel, command, device_state, session)
                if update is None:
                    self._warn_rejected(lp, channel, command)
                    return None

                if channel == ChannelKind.ALERT and session.alert_restorer is not None:
                    session.alert_restorer.schedule(update.alert)

                update.freeze()
                logger.info(
                    "%s Sending %s update",
                    lp,
                    channel,
                    extra={"group_id": self.group_id, "payload": update.to_payload()},
                )
                try:
                    await self.bridge.send_state_update(self.group_id, update)
                except Exception:
                    logger.exception("%s Bridge rejected update %s", lp, update)
                return update

    def _warn_rejected(self, lp: str, channel: ChannelKind, command: Command) -> None:
        if channel == ChannelKind.ALERT and isinstance(command, StringCommand):
            logger.warning(
                "%s Unsupported String command: %s. Supported commands are: %s, %s, %s",
                lp,
                command.value,
                AlertMode.NONE.token,
                AlertMode.SELECT.token,
                AlertMode.LSELECT.token,
            )
            return
        supported = ", ".join(kind.kind for kind in SUPPORTED_COMMANDS.get(channel, ()))
        logger.warning(
            "%s Command %s is not supported on channel '%s' (supported: %s)",
            lp,
            command.kind,
            channel,
            supported or "none",
        )

    async def on_device_state_changed(self, device_id: str, state: DeviceState) -> None:
        """Bridge notification: drop the last-sent cache and publish derived channel values."""
        if device_id != self.group_id:
            logger.debug("%s Ignoring state change for group %s", self.lp, device_id)
            return

        with correlation_context():
            async with self._lock:
                session = self.session
                if session is not None:
                    session.invalidate()
                await self._publish_state(state, session)

    async def on_device_added(self, device_id: str, state: DeviceState) -> None:
        await self.on_device_state_changed(device_id, state)

    async def on_device_removed(self, device_id: str) -> None:
        if device_id != self.group_id:
            return
        async with self._lock:
            if self.session is not None and self.session.alert_restorer is not None:
                self.session.alert_restorer.cancel_pending()
        logger.info("%s Group removed from bridge", self.lp)

    async def refresh(self) -> None:
        """Publish the bridge's current state for this group, if it has one."""
        state = self.bridge.get_device_state(self.group_id)
        if state is not None:
            await self.on_device_state_changed(self.group_id, state)

    async def update_configuration(self, params: Mapping[str, object]) -> None:
        """Apply runtime configuration; only ``transitiontime`` is recognized."""
        lp = f"{self.lp}update_configuration:"
        try:
            parsed = TransitionTimeUpdate.from_params(params)
        except ValidationError as e:
            logger.warning("%s Ignoring invalid configuration %s: %s", lp, dict(params), e)
            return
        if parsed is None:
            return

        async with self._lock:
            self.transition_time = parsed.transition_time
            if self.session is not None:
                self.session.transition_time_override = parsed.transition_time
        logger.info("%s Transition time set to %s", lp, parsed.transition_time)

    async def _publish_state(self, state: DeviceState, session: CommandSession | None) -> None:
        lp = f"{self.lp}_publish_state:"
        hsb = converter.to_hsb_value(state)
        if not state.on:
            hsb = HSBValue(hue=hsb.hue, saturation=hsb.saturation, brightness=0)
        await self.publisher.publish(self.group_id, ChannelKind.COLOR, hsb)

        color_temperature = converter.to_color_temperature_percent(state) if state.color_mode == ColorMode.CT else None
        await self.publisher.publish(self.group_id, ChannelKind.COLOR_TEMPERATURE, color_temperature)

        brightness = converter.to_brightness_percent(state) if state.on else 0
        await self.publisher.publish(self.group_id, ChannelKind.BRIGHTNESS, brightness)
        await self.publisher.publish(self.group_id, ChannelKind.SWITCH, "ON" if state.on else "OFF")

        alert = converter.to_alert_token(state)
        if alert is not None and alert != AlertMode.NONE.token:
            await self.publisher.publish(self.group_id, ChannelKind.ALERT, alert)
            if session is not None and session.alert_restorer is not None:
                session.alert_restorer.schedule(alert)

        logger.debug(
            "%s Published state",
            lp,
            extra={"on": state.on, "brightness": brightness, "color_mode": state.color_mode.value, "alert": alert},
        )

    async def _restore_alert(self) -> None:
        with correlation_context():
            async with self._lock:
                if self.session is None:
                    return
                logger.debug("%s Restoring alert channel to %s", self.lp, AlertMode.NONE.token)
                await self.publisher.publish(self.group_id, ChannelKind.ALERT, AlertMode.NONE.token)
