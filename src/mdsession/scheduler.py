"""Cancellable timers and the autosave triggers built on them."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class Scheduler(ABC):
    """Abstract source of delayed callbacks."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], Any]) -> Any:
        """Run callback after delay seconds.

        Returns a handle whose ``cancel()`` prevents the call if it has not
        happened yet.
        """


class AsyncioScheduler(Scheduler):
    """Schedules on an asyncio event loop (the running one by default)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], Any]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class AutosaveScheduler:
    """Debounced and periodic save triggers sharing one save callback.

    At most one debounce and one interval timer are outstanding; starting
    either cancels the previous one.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        save: Callable[[], Any],
        is_dirty: Callable[[], bool],
        debounce_ms: int = 300,
        interval_ms: int = 30_000,
    ):
        self._scheduler = scheduler
        self._save = save
        self._is_dirty = is_dirty
        self.debounce_ms = debounce_ms
        self.interval_ms = interval_ms
        self._debounce_handle = None
        self._interval_handle = None

    @property
    def running(self) -> bool:
        return self._interval_handle is not None

    @property
    def pending(self) -> bool:
        return self._debounce_handle is not None

    # ------------------------------------------------------------------
    # Debounce
    # ------------------------------------------------------------------

    def trigger(self) -> None:
        """(Re)start the debounce timer; bursts collapse into one save."""
        self.cancel_pending()
        self._debounce_handle = self._scheduler.call_later(
            self.debounce_ms / 1000, self._on_debounce
        )

    def cancel_pending(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    def _on_debounce(self) -> None:
        self._debounce_handle = None
        self._save()

    # ------------------------------------------------------------------
    # Interval
    # ------------------------------------------------------------------

    def start(self, interval_ms: Optional[int] = None) -> None:
        """Start the periodic trigger, replacing any running one."""
        self.stop()
        if interval_ms is not None:
            self.interval_ms = interval_ms
        if self.interval_ms <= 0:
            logger.debug("Autosave interval disabled")
            return
        self._schedule_tick()
        logger.debug("Autosave every %d ms", self.interval_ms)

    def stop(self) -> None:
        if self._interval_handle is not None:
            self._interval_handle.cancel()
            self._interval_handle = None

    def _schedule_tick(self) -> None:
        self._interval_handle = self._scheduler.call_later(
            self.interval_ms / 1000, self._on_tick
        )

    def _on_tick(self) -> None:
        self._schedule_tick()
        if self._is_dirty():
            self._save()

    def shutdown(self) -> None:
        """Cancel both timers."""
        self.cancel_pending()
        self.stop()
