"""Tick-driven registry of one-shot pending actions."""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple

from .executor import Executor
from .heartbeat import Connection, Heartbeat

logger = logging.getLogger(__name__)


@dataclass
class PendingAction:
    """A callback waiting for the tick clock to reach ``target_time``."""

    action_id: int
    target_time: float
    callback: Callable[..., Any]
    arguments: Tuple[Any, ...] = ()
    inline: bool = False
    handle: Optional[Connection] = field(default=None, repr=False)

    def due(self, now: float) -> bool:
        return now >= self.target_time


class TimerRegistry:
    """Pending actions keyed by id, scanned once per heartbeat tick.

    Actions are checked in scheduling order. An action scheduled while a
    tick is being processed is first checked on the following tick.
    """

    def __init__(self, heartbeat: Heartbeat, executor: Executor) -> None:
        self.heartbeat = heartbeat
        self.executor = executor
        self._lock = threading.RLock()
        self._actions: Dict[int, PendingAction] = {}
        self._ids = itertools.count(1)
        self._subscription: Optional[Connection] = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._actions)

    # ------------------------------------------------------------------
    def schedule(
        self,
        delay: float,
        callback: Callable[..., Any],
        arguments: Tuple[Any, ...] = (),
        *,
        inline: bool = False,
    ) -> Connection:
        """Register ``callback(*arguments)`` to fire ``delay`` from now."""

        with self._lock:
            action_id = next(self._ids)
            action = PendingAction(
                action_id=action_id,
                target_time=self.heartbeat.now() + delay,
                callback=callback,
                arguments=tuple(arguments),
                inline=inline,
            )
            action.handle = Connection(lambda: self._discard(action_id))
            self._actions[action_id] = action
            if self._subscription is None:
                self._subscription = self.heartbeat.connect(self._on_tick)
        logger.debug("scheduled action %s at t=%.4f", action_id, action.target_time)
        return action.handle

    def _discard(self, action_id: int) -> None:
        with self._lock:
            if self._actions.pop(action_id, None) is not None:
                logger.debug("cancelled action %s", action_id)

    def cancel_all(self) -> int:
        """Disconnect every pending action; returns how many were pending."""

        with self._lock:
            handles = [action.handle for action in self._actions.values()]
        for handle in handles:
            if handle is not None:
                handle.disconnect()
        return len(handles)

    # ------------------------------------------------------------------
    def _claim(self, action_id: int, now: float) -> Optional[PendingAction]:
        with self._lock:
            action = self._actions.get(action_id)
            if action is None or not action.due(now):
                return None
            del self._actions[action_id]
        # the entry is gone, so this only flips the handle's state
        if action.handle is not None:
            action.handle.disconnect()
        return action

    def _on_tick(self, _delta: float) -> None:
        now = self.heartbeat.now()
        with self._lock:
            pending = list(self._actions)
        for action_id in pending:
            action = self._claim(action_id, now)
            if action is not None:
                self._fire(action)

    def _fire(self, action: PendingAction) -> None:
        logger.debug("firing action %s", action.action_id)
        if not action.inline:
            self.executor.run(action.callback, action.arguments)
            return
        try:
            action.callback(*action.arguments)
        except Exception:  # noqa: BLE001
            logger.exception("inline action %s failed", action.action_id)


__all__ = ["PendingAction", "TimerRegistry"]
