"""Environment-driven configuration for the heartbeat scheduler."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from .runtime.errors import InvalidArgument


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidArgument(f"{name} must be a number, got {raw!r}") from exc


@dataclass
class SchedulerConfig:
    """Tunables for the scheduler and its tick driver."""

    tick_rate: float = field(default_factory=lambda: _env_float("HEARTBEAT_TICK_RATE", 60.0))
    default_wait: float = field(default_factory=lambda: _env_float("HEARTBEAT_DEFAULT_WAIT", 0.03))
    default_lifetime: float = field(
        default_factory=lambda: _env_float("HEARTBEAT_DEFAULT_LIFETIME", 10.0)
    )

    def __post_init__(self) -> None:
        if self.tick_rate <= 0:
            raise InvalidArgument("tick_rate must be positive")
        if self.default_wait < 0:
            raise InvalidArgument("default_wait must not be negative")
        if self.default_lifetime < 0:
            raise InvalidArgument("default_lifetime must not be negative")

    @property
    def frame_interval(self) -> float:
        return 1.0 / self.tick_rate


def load_env(env_file: Optional[str] = None) -> bool:
    """Load variables from a .env file via python-dotenv."""

    env_file = env_file or os.environ.get("HEARTBEAT_ENV_FILE")
    if env_file:
        return load_dotenv(env_file)
    return load_dotenv()


__all__ = ["SchedulerConfig", "load_env"]
