"""Public scheduling operations driven by a :class:`Heartbeat`."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ..config import SchedulerConfig
from .disposal import adapt
from .executor import Executor, SpawnResult
from .guard import RuntimeGuard
from .heartbeat import Connection, Heartbeat
from .timers import TimerRegistry
from .validation import expect_callable, expect_number

logger = logging.getLogger(__name__)


class Scheduler:
    """Frame-aligned wait, delay, spawn and deferred disposal."""

    def __init__(
        self,
        heartbeat: Optional[Heartbeat] = None,
        *,
        guard: Optional[RuntimeGuard] = None,
        config: Optional[SchedulerConfig] = None,
    ) -> None:
        self.heartbeat = heartbeat or Heartbeat()
        self.guard = guard or RuntimeGuard()
        self.config = config or SchedulerConfig()
        self._executor = Executor(self.guard)
        self._timers = TimerRegistry(self.heartbeat, self._executor)

    @property
    def pending_count(self) -> int:
        """Number of delayed actions and disposals not yet fired or cancelled."""

        return len(self._timers)

    # ------------------------------------------------------------------
    def wait(self, seconds: Optional[float] = None) -> float:
        """Suspend the calling context for at least ``seconds`` of ticks.

        Returns the elapsed tick time, which may overshoot by up to one tick.
        """

        seconds = expect_number(seconds, position=1, operation="Scheduler.wait", optional=True)
        if seconds is None:
            seconds = self.config.default_wait
        seconds = max(seconds, 0.0)
        remaining = seconds
        while remaining > 0:
            remaining -= self.heartbeat.wait()
        return seconds - remaining

    def delay(self, seconds: float, callback: Callable[..., Any], *args: Any) -> Connection:
        """Run ``callback(*args)`` once ``seconds`` of tick time have passed."""

        seconds = expect_number(seconds, position=1, operation="Scheduler.delay", minimum=0)
        expect_callable(callback, position=2, operation="Scheduler.delay")
        return self._timers.schedule(seconds, callback, args)

    def spawn(self, callback: Callable[..., Any], *args: Any) -> SpawnResult:
        """Run ``callback(*args)`` now in its own execution context.

        Returns once the callback finishes or first suspends.
        """

        return self._executor.spawn(callback, *args)

    def spawn_delayed(self, callback: Callable[..., Any], *args: Any) -> None:
        """Like :meth:`spawn`, but starting on the next tick."""

        expect_callable(callback, position=1, operation="Scheduler.spawn_delayed")
        self._timers.schedule(0.0, callback, args)

    def add_item(self, reference: Any, lifetime: Optional[float] = None) -> Connection:
        """Tear ``reference`` down once ``lifetime`` of tick time has passed."""

        disposable = adapt(reference, position=1, operation="Scheduler.add_item")
        lifetime = expect_number(
            lifetime, position=2, operation="Scheduler.add_item", optional=True, minimum=0
        )
        if lifetime is None:
            lifetime = self.config.default_lifetime
        return self._timers.schedule(lifetime, disposable.teardown, inline=True)

    def cancel_all(self) -> int:
        return self._timers.cancel_all()


_scheduler: Optional[Scheduler] = None


def get_scheduler() -> Scheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = Scheduler()
    return _scheduler


__all__ = ["Scheduler", "get_scheduler"]
