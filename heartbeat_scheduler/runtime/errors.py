"""Exception taxonomy for the heartbeat scheduler."""

from __future__ import annotations


class SchedulerError(Exception):
    """Base class for scheduler errors."""


class InvalidArgument(SchedulerError, TypeError, ValueError):
    """Raised before any side effect when an argument is malformed."""


__all__ = ["InvalidArgument", "SchedulerError"]
