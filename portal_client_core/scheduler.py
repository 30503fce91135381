"""Time source and single-slot timer used for session refresh.

Both are injected into SessionStore so tests can drive time explicitly.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

_LOGGER = logging.getLogger(__name__)

RefreshAction = Callable[[], Awaitable[None]]


def compute_refresh_at(created_at: int, expires_at: int) -> int:
    """Return the midpoint of a session window, in epoch seconds."""
    return created_at + (expires_at - created_at) // 2


class Clock(ABC):
    """Abstract wall clock in whole epoch seconds."""

    @abstractmethod
    def now(self) -> int:
        """Return the current time in epoch seconds."""


class SystemClock(Clock):
    """Wall clock backed by time.time()."""

    def now(self) -> int:
        return int(time.time())


class Scheduler(ABC):
    """A single timer slot.

    At most one action is pending at a time; arm() replaces whatever was
    pending before.
    """

    @abstractmethod
    def arm(self, deadline: int, action: RefreshAction) -> None:
        """Run action once at epoch second deadline, replacing any pending one."""

    @abstractmethod
    def disarm(self) -> None:
        """Cancel the pending action, if any. Idempotent."""

    def cancel(self) -> None:
        """Disarm and stop an action that has already started."""
        self.disarm()

    @property
    @abstractmethod
    def deadline(self) -> int | None:
        """Deadline of the pending action, or None."""

    @property
    def armed(self) -> bool:
        return self.deadline is not None


class LoopScheduler(Scheduler):
    """Scheduler backed by the running asyncio loop's call_later.

    The timer runs on loop when given, otherwise on the loop running at
    arm() time; arm() raises RuntimeError and leaves the slot unchanged when
    there is neither. A fired action runs as a task. disarm() leaves a
    started action alone; cancel() stops it too.
    """

    def __init__(
        self, clock: Clock, *, loop: asyncio.AbstractEventLoop | None = None
    ) -> None:
        self._clock = clock
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._deadline: int | None = None
        self._running: asyncio.Task[None] | None = None

    @property
    def deadline(self) -> int | None:
        return self._deadline

    def arm(self, deadline: int, action: RefreshAction) -> None:
        loop = self._loop or asyncio.get_running_loop()
        self.disarm()
        delay = max(0, deadline - self._clock.now())
        self._deadline = deadline
        self._handle = loop.call_later(delay, self._fire, loop, action)
        _LOGGER.debug("Timer armed for %d (in %ds)", deadline, delay)

    def disarm(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
            _LOGGER.debug("Timer disarmed (was due at %s)", self._deadline)
        self._deadline = None

    def cancel(self) -> None:
        self.disarm()
        if self._running is not None and not self._running.done():
            _LOGGER.debug("Cancelling running action")
            self._running.cancel()
        self._running = None

    def _fire(
        self, loop: asyncio.AbstractEventLoop, action: RefreshAction
    ) -> None:
        self._handle = None
        self._deadline = None
        task = loop.create_task(action())
        self._running = task
        task.add_done_callback(self._on_action_done)

    def _on_action_done(self, task: asyncio.Task[None]) -> None:
        if self._running is task:
            self._running = None
        if task.cancelled():
            return
        err = task.exception()
        if err is not None:
            _LOGGER.error("Scheduled action failed: %s", err, exc_info=err)
