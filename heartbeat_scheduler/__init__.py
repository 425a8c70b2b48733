"""Frame-aligned cooperative scheduling on top of a heartbeat tick."""

from __future__ import annotations

from .config import SchedulerConfig
from .runtime.driver import TickDriver
from .runtime.errors import InvalidArgument, SchedulerError
from .runtime.executor import ExecutionFailure, SpawnResult
from .runtime.guard import RuntimeGuard
from .runtime.heartbeat import Connection, Heartbeat
from .runtime.scheduler import Scheduler, get_scheduler

__all__ = [
    "Connection",
    "ExecutionFailure",
    "Heartbeat",
    "InvalidArgument",
    "RuntimeGuard",
    "Scheduler",
    "SchedulerConfig",
    "SchedulerError",
    "SpawnResult",
    "TickDriver",
    "get_scheduler",
]
