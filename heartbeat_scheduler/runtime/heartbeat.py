"""Per-frame tick event and the monotonic clock it advances."""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, Dict, List, Optional

from .context import current_context
from .errors import SchedulerError
from .validation import expect_number

logger = logging.getLogger(__name__)

TickHandler = Callable[[float], None]


class Connection:
    """Cancellation handle for a subscription or a pending action."""

    def __init__(self, on_disconnect: Optional[Callable[[], None]] = None) -> None:
        self._on_disconnect = on_disconnect
        self._connected = True
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        return self._connected

    def disconnect(self) -> None:
        """Cancel the subscription. Safe to call any number of times."""

        with self._lock:
            if not self._connected:
                return
            self._connected = False
            callback, self._on_disconnect = self._on_disconnect, None
        if callback is not None:
            callback()

    def __repr__(self) -> str:
        return f"<Connection connected={self._connected}>"


class Heartbeat:
    """Tick event fired once per frame with the elapsed delta.

    Subscribers run synchronously inside :meth:`fire`, in subscription order.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._handlers: Dict[int, TickHandler] = {}
        self._connections: Dict[int, Connection] = {}
        self._ids = itertools.count(1)
        self._now = 0.0
        self._ticks = 0
        self._local = threading.local()

    # ------------------------------------------------------------------
    def now(self) -> float:
        """Current tick-clock reading."""

        return self._now

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._handlers)

    @property
    def dispatching(self) -> bool:
        """True when the calling thread is inside :meth:`fire`."""

        return getattr(self._local, "dispatching", False)

    # ------------------------------------------------------------------
    def connect(self, handler: TickHandler) -> Connection:
        with self._lock:
            key = next(self._ids)
            connection = Connection(lambda: self._remove(key))
            self._handlers[key] = handler
            self._connections[key] = connection
        return connection

    def _remove(self, key: int) -> None:
        with self._lock:
            self._handlers.pop(key, None)
            self._connections.pop(key, None)

    def fire(self, delta: float) -> int:
        """Advance the clock by ``delta`` and run every subscriber once.

        Returns the number of subscribers invoked.
        """

        delta = expect_number(delta, position=1, operation="Heartbeat.fire", minimum=0)
        with self._lock:
            self._now += delta
            self._ticks += 1
            snapshot: List[tuple] = [
                (self._connections[key], handler) for key, handler in self._handlers.items()
            ]

        invoked = 0
        nested = self.dispatching
        self._local.dispatching = True
        try:
            for connection, handler in snapshot:
                if not connection.connected:
                    continue
                invoked += 1
                try:
                    handler(delta)
                except Exception:  # noqa: BLE001
                    logger.exception("heartbeat subscriber failed on tick %s", self._ticks)
        finally:
            self._local.dispatching = nested
        return invoked

    def wait(self) -> float:
        """Suspend the calling context until the next tick; return its delta."""

        if self.dispatching:
            raise SchedulerError("cannot wait for a tick from inside tick dispatch")

        context = current_context()
        if context is not None:
            def _resume(delta: float) -> None:
                connection.disconnect()
                context.switch(delta)

            with self._lock:
                connection = self.connect(_resume)
            return context.suspend()

        released = threading.Event()
        received: List[float] = []

        def _release(delta: float) -> None:
            connection.disconnect()
            received.append(delta)
            released.set()

        with self._lock:
            connection = self.connect(_release)
        released.wait()
        return received[0]


__all__ = ["Connection", "Heartbeat", "TickHandler"]
