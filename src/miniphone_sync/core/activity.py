"""Background activity monitor.

Two states:

- ``DISARMED``: no recurring check is live
- ``ARMED``: a single task polls every ``poll_period`` seconds and fires the
  action once idle time exceeds ``interval`` seconds

Firing resets the last-active time to "now", so the next tick does not fire
again. Reconfiguring always cancels the live task before arming a new one.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from enum import Enum

import structlog

from miniphone_sync.models.message import now_ms

log = structlog.get_logger()


class ActivityClock:
    """Owner of the shared "last active" timestamp (epoch milliseconds).

    Writers are explicit: user interaction, successful sends and monitor
    firings all go through :meth:`touch`.
    """

    def __init__(self, last_active_time: int | None = None, now: Callable[[], int] = now_ms) -> None:
        self._now = now
        self._last_active_time = last_active_time if last_active_time is not None else now()

    def touch(self, at: int | None = None) -> int:
        self._last_active_time = at if at is not None else self._now()
        return self._last_active_time

    def read(self) -> int:
        return self._last_active_time

    def idle_ms(self, at: int | None = None) -> int:
        return (at if at is not None else self._now()) - self._last_active_time


class MonitorState(Enum):
    """Activity monitor states."""

    DISARMED = "disarmed"
    ARMED = "armed"


class ActivityMonitor:
    """Fires an action when the user has been idle longer than the interval.

    Example:
        monitor = ActivityMonitor(clock, action=lambda: notifier.notify(...))
        monitor.configure(enabled=True, interval=300)
        ...
        await monitor.stop()
    """

    DEFAULT_POLL_PERIOD = 10.0

    def __init__(
        self,
        clock: ActivityClock,
        action: Callable[[], None],
        poll_period: float = DEFAULT_POLL_PERIOD,
        now: Callable[[], int] = now_ms,
    ) -> None:
        self._clock = clock
        self._action = action
        self._poll_period = poll_period
        self._now = now

        self._enabled = False
        self._interval = 0
        self._task: asyncio.Task[None] | None = None
        self._fired = 0

    @property
    def state(self) -> MonitorState:
        return MonitorState.ARMED if self._task is not None else MonitorState.DISARMED

    @property
    def interval(self) -> int:
        return self._interval

    @property
    def fire_count(self) -> int:
        return self._fired

    def configure(self, enabled: bool, interval: int) -> MonitorState:
        """Apply settings: cancel the live check, then arm a new one if enabled.

        Must be called from within a running event loop when ``enabled``.
        """
        self._cancel()
        self._enabled = enabled
        self._interval = interval

        if not enabled or interval <= 0:
            log.debug("activity_monitor_disarmed", enabled=enabled, interval=interval)
            return self.state

        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="activity_monitor"
        )
        log.info("activity_monitor_armed", interval=interval, poll_period=self._poll_period)
        return self.state

    def check(self) -> bool:
        """Run one poll tick. Returns True if the action fired."""
        if not self._enabled or self._interval <= 0:
            return False

        now = self._now()
        if now - self._clock.read() <= self._interval * 1000:
            return False

        self._clock.touch(now)
        self._fired += 1
        log.info("activity_monitor_fired", interval=self._interval, fire_count=self._fired)
        try:
            self._action()
        except Exception as e:
            log.warning("activity_action_failed", error=str(e))
        return True

    async def stop(self) -> None:
        """Disarm and wait for the recurring check to finish."""
        task = self._cancel()
        self._enabled = False
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def _cancel(self) -> asyncio.Task[None] | None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        return task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._poll_period)
            self.check()
