"""Fixed-rate driver that fires a :class:`Heartbeat` from a real clock."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from .guard import RuntimeGuard
from .heartbeat import Heartbeat

logger = logging.getLogger(__name__)


class TickDriver:
    """Cooperative frame loop that relies on :class:`RuntimeGuard`."""

    def __init__(
        self,
        heartbeat: Heartbeat,
        guard: RuntimeGuard,
        *,
        tick_rate: float = 60.0,
        time_fn: Optional[Callable[[], float]] = None,
    ) -> None:
        if tick_rate <= 0:
            raise ValueError("tick_rate must be positive")
        self.heartbeat = heartbeat
        self.guard = guard
        self._frame_interval = 1.0 / tick_rate
        self._time_fn = time_fn or time.monotonic
        self._last_time: Optional[float] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def frame_interval(self) -> float:
        return self._frame_interval

    # ------------------------------------------------------------------
    def tick(self, current_time: Optional[float] = None) -> float:
        """Fire one heartbeat with the time elapsed since the previous tick.

        Returns the delta that was delivered.
        """

        now = current_time if current_time is not None else self._time_fn()
        if self._last_time is None:
            delta = 0.0
        else:
            delta = max(now - self._last_time, 0.0)
        self._last_time = now
        self.heartbeat.fire(delta)
        return delta

    # ------------------------------------------------------------------
    def run(self, *, max_ticks: Optional[int] = None) -> int:
        """Run until the guard requests shutdown or ``max_ticks`` reached.

        Returns the number of ticks fired.
        """

        ticks = 0
        logger.info("tick driver started (interval=%.4fs)", self._frame_interval)
        while not self.guard.should_stop:
            started = self._time_fn()
            self.tick(started)
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                logger.debug("tick driver reached max_ticks=%s", max_ticks)
                break
            elapsed = self._time_fn() - started
            self.guard.sleep(self._frame_interval - elapsed)

        logger.info("tick driver exiting after %s ticks (failures=%s)", ticks, len(self.guard.failures))
        return ticks

    def start(self) -> threading.Thread:
        """Run the loop on a daemon thread."""

        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("tick driver already running")
        self._thread = threading.Thread(target=self.run, name="heartbeat-driver", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        self.guard.request_shutdown("driver-stop")
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None


__all__ = ["TickDriver"]
