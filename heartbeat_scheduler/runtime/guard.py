"""Stop flag, signal handling and failure ledger for the tick runtime."""

from __future__ import annotations

import logging
import signal
import threading
import time
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .executor import ExecutionFailure

logger = logging.getLogger(__name__)


class RuntimeGuard:
    """Stop flag and failure ledger shared by the tick driver and executor.

    Failures captured from spawned or delayed callbacks are kept here and
    echoed to notifiers; they never stop the tick loop on their own.
    """

    def __init__(
        self,
        *,
        sleep_fn: Optional[Callable[[float], None]] = None,
        time_fn: Optional[Callable[[], float]] = None,
    ) -> None:
        self._shutdown = threading.Event()
        self._lock = threading.Lock()
        self._failures: List["ExecutionFailure"] = []
        self._notifiers: List[Callable[[str], None]] = []
        self._sleep_fn = sleep_fn or time.sleep
        self._time_fn = time_fn or time.monotonic
        self._last_heartbeat: Optional[float] = None
        self._shutdown_reason: Optional[str] = None
        self._installed_signals: bool = False

    # ------------------------------------------------------------------
    # Stopping the tick loop
    # ------------------------------------------------------------------
    def install_signal_handlers(self) -> None:
        """Stop the tick loop on SIGINT or SIGTERM."""

        if self._installed_signals:
            return

        def _on_signal(signum: int, _frame) -> None:  # noqa: ANN001
            self.request_shutdown(f"signal:{signal.Signals(signum).name}")

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                signal.signal(sig, _on_signal)
            except ValueError:  # pragma: no cover - not on the main thread
                continue
        self._installed_signals = True

    def request_shutdown(self, reason: Optional[str] = None) -> None:
        """Ask the tick driver to exit after its current frame."""

        if reason and not self._shutdown_reason:
            self._shutdown_reason = reason
        self._shutdown.set()
        if reason:
            logger.info("tick loop stop requested (%s)", reason)
        self._notify(f"shutdown:{reason or 'requested'}")

    @property
    def should_stop(self) -> bool:
        return self._shutdown.is_set()

    @property
    def shutdown_reason(self) -> Optional[str]:
        return self._shutdown_reason

    def sleep(self, duration: float) -> None:
        """Pause between frames unless a stop was requested."""

        if not self.should_stop and duration > 0:
            self._sleep_fn(duration)

    # ------------------------------------------------------------------
    # Status fan-out
    # ------------------------------------------------------------------
    def add_notifier(self, callback: Callable[[str], None]) -> None:
        """Receive "shutdown:", "failure:" and "heartbeat:" status lines."""

        self._notifiers.append(callback)

    def _notify(self, message: str) -> None:
        for callback in list(self._notifiers):
            try:
                callback(message)
            except Exception as exc:  # noqa: BLE001
                logger.debug("status notifier %r raised: %s", callback, exc)

    # ------------------------------------------------------------------
    # Failure ledger and liveness
    # ------------------------------------------------------------------
    def record_failure(self, failure: "ExecutionFailure") -> None:
        """Append a callback failure to the ledger and announce it."""

        with self._lock:
            self._failures.append(failure)
        self._notify(f"failure:{failure.summary()}")

    def heartbeat(self, source: str = "runtime") -> None:
        """Stamp the last time ``source`` reported the scheduler alive."""

        self._last_heartbeat = self._time_fn()
        self._notify(f"heartbeat:{source}")

    @property
    def last_heartbeat(self) -> Optional[float]:
        return self._last_heartbeat

    @property
    def failures(self) -> List["ExecutionFailure"]:
        with self._lock:
            return list(self._failures)

    @property
    def has_errors(self) -> bool:
        return bool(self._failures)

    @property
    def errors(self) -> List[str]:
        return [failure.summary() for failure in self.failures]

    @property
    def status(self) -> Dict[str, Optional[float]]:
        return {
            "last_heartbeat": self._last_heartbeat,
            "failures": float(len(self._failures)),
            "shutdown": 1.0 if self.should_stop else 0.0,
        }


__all__ = ["RuntimeGuard"]
