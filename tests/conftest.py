"""Pytest configuration and fixtures for heartbeat scheduler tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from heartbeat_scheduler.config import SchedulerConfig  # noqa: E402
from heartbeat_scheduler.runtime.guard import RuntimeGuard  # noqa: E402
from heartbeat_scheduler.runtime.heartbeat import Heartbeat  # noqa: E402
from heartbeat_scheduler.runtime.scheduler import Scheduler  # noqa: E402

FRAME = 1 / 60


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep configuration defaults independent of the host environment."""

    for name in ("HEARTBEAT_TICK_RATE", "HEARTBEAT_DEFAULT_WAIT", "HEARTBEAT_DEFAULT_LIFETIME"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def heartbeat() -> Heartbeat:
    return Heartbeat()


@pytest.fixture()
def guard() -> RuntimeGuard:
    return RuntimeGuard(sleep_fn=lambda _seconds: None)


@pytest.fixture()
def scheduler(heartbeat: Heartbeat, guard: RuntimeGuard) -> Scheduler:
    return Scheduler(heartbeat, guard=guard, config=SchedulerConfig())
