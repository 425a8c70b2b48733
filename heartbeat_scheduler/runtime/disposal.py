"""Best-effort teardown of heterogeneous disposable references."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional

from .errors import InvalidArgument
from .heartbeat import Connection
from .validation import type_name

logger = logging.getLogger(__name__)

# probed in this order; the first callable one wins
TEARDOWN_METHODS = ("Destroy", "destroy", "Disconnect", "disconnect")

_SCALARS = (bool, int, float, complex, str, bytes, bytearray)


class Disposable:
    """Adapter exposing a single :meth:`teardown` over a caller reference."""

    shape = "handle"

    def __init__(self, reference: Any) -> None:
        self.reference = reference

    def release(self) -> None:
        """Drop the reference so that teardown is skipped."""

        self.reference = None

    def _lookup(self, name: str) -> Optional[Callable[[], Any]]:
        method = getattr(self.reference, name, None)
        return method if callable(method) else None

    def capability(self) -> Optional[str]:
        """Name of the method teardown would call right now, if any."""

        if self.reference is None:
            return None
        for name in TEARDOWN_METHODS:
            if self._lookup(name) is not None:
                return name
        return None

    def teardown(self) -> Optional[str]:
        """Invoke the first available teardown method.

        Returns the method name that was called, or None when nothing was.
        Errors raised by the method are swallowed.
        """

        name = self.capability()
        if name is None:
            logger.debug("no teardown capability on %s", type_name(self.reference))
            return None
        method = self._lookup(name)
        try:
            method()
        except Exception as exc:  # noqa: BLE001
            logger.debug("teardown %s.%s failed: %s", type_name(self.reference), name, exc)
        return name


class HandleDisposable(Disposable):
    """Arbitrary object probed by attribute."""


class RecordDisposable(Disposable):
    """Mapping record probed by key."""

    shape = "record"

    def _lookup(self, name: str) -> Optional[Callable[[], Any]]:
        method = self.reference.get(name)
        return method if callable(method) else None


class ConnectionDisposable(Disposable):
    """Subscription handle; teardown disconnects it."""

    shape = "connection"

    def capability(self) -> Optional[str]:
        return None if self.reference is None else "disconnect"

    def _lookup(self, name: str) -> Optional[Callable[[], Any]]:
        return self.reference.disconnect


def adapt(reference: Any, *, position: int = 1, operation: str = "Scheduler.add_item") -> Disposable:
    """Wrap ``reference`` in the adapter matching its shape."""

    if isinstance(reference, Disposable):
        if reference.reference is not None:
            return reference
    elif isinstance(reference, Connection):
        return ConnectionDisposable(reference)
    elif isinstance(reference, Mapping):
        record = RecordDisposable(reference)
        if record.capability() is not None:
            return record
    elif reference is not None and not isinstance(reference, _SCALARS):
        return HandleDisposable(reference)
    raise InvalidArgument(
        f"Invalid argument #{position} to '{operation}' "
        f"(handle or record or Connection expected, got {type_name(reference)})"
    )


__all__ = [
    "ConnectionDisposable",
    "Disposable",
    "HandleDisposable",
    "RecordDisposable",
    "TEARDOWN_METHODS",
    "adapt",
]
