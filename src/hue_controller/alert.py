"""Timed reset of the alert channel back to its idle token."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping

from hue_controller.const import ALERT_DURATION_LONG_SELECT_MS, ALERT_DURATION_NONE, ALERT_DURATION_SELECT_MS
from hue_controller.logging_abstraction import get_logger
from hue_controller.structs import AlertMode

__all__ = ["ALERT_DURATIONS_MS", "DelayedAlertRestorer", "alert_duration"]

logger = get_logger(__name__)

ALERT_DURATIONS_MS: Mapping[AlertMode, int] = {
    AlertMode.LSELECT: ALERT_DURATION_LONG_SELECT_MS,
    AlertMode.SELECT: ALERT_DURATION_SELECT_MS,
}


def alert_duration(mode: AlertMode | str | None, durations: Mapping[AlertMode, int] = ALERT_DURATIONS_MS) -> int:
    """Milliseconds until the alert channel is reset, -1 for modes that are not restored."""
    if mode is None:
        return ALERT_DURATION_NONE
    resolved = mode if isinstance(mode, AlertMode) else AlertMode.from_token(mode)
    if resolved is None:
        return ALERT_DURATION_NONE
    return durations.get(resolved, ALERT_DURATION_NONE)


class DelayedAlertRestorer:
    """Holds at most one pending alert reset for a group.

    ``on_restore`` is awaited when the timer fires. It is expected to take the
    owning handler's lock before touching any state.
    """

    lp: str = "DelayedAlertRestorer:"

    def __init__(
        self,
        on_restore: Callable[[], Awaitable[None]],
        durations: Mapping[AlertMode, int] = ALERT_DURATIONS_MS,
        name: str = "",
    ) -> None:
        self._on_restore: Callable[[], Awaitable[None]] = on_restore
        self._durations: Mapping[AlertMode, int] = durations
        self._handle: asyncio.TimerHandle | None = None
        self._restore_task: asyncio.Task[None] | None = None
        self.pending_delay_ms: int | None = None
        if name:
            self.lp = f"DelayedAlertRestorer:{name}:"

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, mode: AlertMode | str | None) -> asyncio.TimerHandle | None:
        """Replace any pending reset with one for ``mode``.

        Args:
            mode: Alert mode or channel token that was just requested or reported

        Returns:
            The timer handle, or None if the mode does not auto-reset

        """
        self.cancel_pending()
        delay_ms = alert_duration(mode, self._durations)
        if delay_ms <= 0:
            logger.debug("%s No alert reset for mode %s", self.lp, mode)
            return None

        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay_ms / 1000, self._fire)
        self.pending_delay_ms = delay_ms
        logger.debug("%s Alert reset in %dms for mode %s", self.lp, delay_ms, mode)
        return self._handle

    def cancel_pending(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        self.pending_delay_ms = None
        logger.debug("%s Pending alert reset cancelled", self.lp)

    def _fire(self) -> None:
        self._handle = None
        self.pending_delay_ms = None
        self._restore_task = asyncio.create_task(self._on_restore())
        self._restore_task.add_done_callback(self._restore_done)

    def _restore_done(self, task: asyncio.Task[None]) -> None:
        if task is self._restore_task:
            self._restore_task = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("%s Alert reset failed: %s", self.lp, exc)

    async def wait_restored(self) -> None:
        """Wait for an in-flight reset callback, if any. Failures are already logged."""
        task = self._restore_task
        if task is not None:
            _ = await asyncio.wait({task})
