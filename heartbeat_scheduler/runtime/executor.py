"""Supervised fire-and-forget execution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

from .context import ExecutionContext
from .guard import RuntimeGuard
from .validation import expect_callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionFailure:
    """An error raised inside scheduled or spawned work."""

    context: str
    error: BaseException
    diagnostic: str

    def summary(self) -> str:
        return f"{self.context}: {self.error}"


@dataclass(frozen=True)
class SpawnResult:
    """Outcome of the first run of a spawned callback.

    Unpacks as ``ok, payload``.
    """

    ok: bool
    value: Any = None
    diagnostic: Optional[str] = None

    @property
    def payload(self) -> Any:
        return self.value if self.ok else self.diagnostic

    def __iter__(self) -> Iterator[Any]:
        yield self.ok
        yield self.payload

    def __bool__(self) -> bool:
        return self.ok


class Executor:
    """Runs callbacks in isolated execution contexts and reports failures."""

    def __init__(self, guard: Optional[RuntimeGuard] = None) -> None:
        self.guard = guard

    def spawn(self, callback: Callable[..., Any], *args: Any) -> SpawnResult:
        expect_callable(callback, position=1, operation="Scheduler.spawn")
        return self.run(callback, args)

    def run(self, callback: Callable[..., Any], args: tuple = ()) -> SpawnResult:
        context = ExecutionContext(callback, args, on_failure=self._report)
        context.switch()
        if context.failed:
            return SpawnResult(False, diagnostic=context.diagnostic)
        if context.finished:
            return SpawnResult(True, context.value)
        logger.debug("context %s suspended", context.name)
        return SpawnResult(True)

    def _report(self, context: ExecutionContext, exc: BaseException, diagnostic: str) -> None:
        logger.warning("%s", diagnostic)
        if self.guard is not None:
            self.guard.record_failure(ExecutionFailure(context.name, exc, diagnostic))


__all__ = ["ExecutionFailure", "Executor", "SpawnResult"]
