"""Cooperative execution contexts backed by threads.

Each :class:`ExecutionContext` owns an independent call stack (a daemon
thread), but only ever runs while whoever switched into it is blocked waiting
for the hand-off. Control therefore moves between contexts one at a time, the
same way coroutines do, and a context that suspends inside
:meth:`Heartbeat.wait` leaves the tick thread free to keep dispatching.
"""

from __future__ import annotations

import itertools
import logging
import threading
import traceback
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)

_local = threading.local()
_counter = itertools.count(1)

FailureSink = Callable[["ExecutionContext", BaseException, str], None]


def current_context() -> Optional["ExecutionContext"]:
    """Return the context running on the calling thread, if any."""

    return getattr(_local, "context", None)


def format_diagnostic(name: str, exc: BaseException) -> str:
    """Render a readable trace naming the failing context."""

    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return f"{name}: {exc}\n{trace}".rstrip()


class ExecutionContext:
    """A thread that runs ``target(*args)`` cooperatively.

    A switch opens a *turn*; the turn ends when the context suspends or
    finishes. Switchers arriving while a turn is open queue behind it, and
    each switcher only waits for the end of its own turn.
    """

    def __init__(
        self,
        target: Callable[..., Any],
        args: Tuple[Any, ...] = (),
        *,
        name: Optional[str] = None,
        on_failure: Optional[FailureSink] = None,
    ) -> None:
        label = getattr(target, "__name__", type(target).__name__)
        self.name = name or f"spawn-{next(_counter)}:{label}"
        self._target = target
        self._args = tuple(args)
        self._on_failure = on_failure
        self._cond = threading.Condition()
        self._thread = threading.Thread(target=self._bootstrap, name=self.name, daemon=True)
        self._started = False
        self._running = False
        self._turn = 0
        self._resume_pending = False
        self._resume_value: Any = None

        self.finished = False
        self.value: Any = None
        self.error: Optional[BaseException] = None
        self.diagnostic: Optional[str] = None

    # ------------------------------------------------------------------
    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def suspended(self) -> bool:
        return self._started and not self._running and not self.finished

    def switch(self, value: Any = None) -> None:
        """Run the context until it suspends again or finishes.

        ``value`` becomes the return value of the pending :meth:`suspend`.
        """

        if self is current_context():
            raise RuntimeError(f"context {self.name} cannot switch into itself")
        with self._cond:
            while self._running:
                self._cond.wait()
            if self.finished:
                raise RuntimeError(f"context {self.name} already finished")
            self._turn += 1
            turn = self._turn
            self._running = True
            self._resume_value = value
            if not self._started:
                self._started = True
                self._thread.start()
            else:
                self._resume_pending = True
                self._cond.notify_all()
            while self._running and self._turn == turn:
                self._cond.wait()

    def suspend(self) -> Any:
        """End the current turn and block until the next switch.

        Must be called from the context's own thread.
        """

        if self is not current_context():
            raise RuntimeError(f"context {self.name} can only suspend itself")
        with self._cond:
            self._running = False
            self._cond.notify_all()
            while not self._resume_pending:
                self._cond.wait()
            self._resume_pending = False
            return self._resume_value

    # ------------------------------------------------------------------
    def _bootstrap(self) -> None:
        _local.context = self
        try:
            self.value = self._target(*self._args)
        except BaseException as exc:  # noqa: BLE001
            # SystemExit and KeyboardInterrupt end this context only
            self.error = exc
            self.diagnostic = format_diagnostic(self.name, exc)
            if self._on_failure is not None:
                try:
                    self._on_failure(self, exc, self.diagnostic)
                except Exception:  # pragma: no cover - sink failures
                    logger.exception("failure sink raised for %s", self.name)
        finally:
            _local.context = None
            with self._cond:
                self.finished = True
                self._running = False
                self._cond.notify_all()

    def __repr__(self) -> str:
        if self.finished:
            state = "finished"
        elif self.suspended:
            state = "suspended"
        else:
            state = "running"
        return f"<ExecutionContext {self.name} {state}>"


__all__ = ["ExecutionContext", "FailureSink", "current_context", "format_diagnostic"]
