"""Runtime entrypoint for the heartbeat scheduler."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Iterable, Optional

from heartbeat_scheduler.config import SchedulerConfig, load_env
from heartbeat_scheduler.runtime.driver import TickDriver
from heartbeat_scheduler.runtime.guard import RuntimeGuard
from heartbeat_scheduler.runtime.scheduler import Scheduler


def _setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


def _parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Heartbeat scheduler runtime")
    parser.add_argument("--dry-run", action="store_true", help="Run a limited number of ticks and exit")
    parser.add_argument("--ticks", type=int, default=3, help="Number of ticks when running in dry-run mode")
    parser.add_argument("--tick-rate", type=float, default=None, help="Heartbeat ticks per second")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(list(argv) if argv is not None else None)


def _register_jobs(scheduler: Scheduler, guard: RuntimeGuard) -> None:
    interval = max(scheduler.config.frame_interval * 30, 0.5)

    def status() -> None:
        guard.heartbeat("scheduler")
        logging.debug("runtime status: %s (pending=%s)", guard.status, scheduler.pending_count)
        if not guard.should_stop:
            scheduler.delay(interval, status)

    scheduler.delay(0, status)
    # a throwaway subscription, disconnected by the disposal scheduler
    probe = scheduler.heartbeat.connect(lambda _delta: None)
    scheduler.add_item(probe, interval)


def run(argv: Optional[Iterable[str]] = None) -> int:
    args = _parse_args(argv)
    _setup_logging(args.verbose)
    load_env()

    config = SchedulerConfig()
    if args.tick_rate is not None:
        config = replace(config, tick_rate=args.tick_rate)

    guard = RuntimeGuard()
    guard.install_signal_handlers()

    scheduler = Scheduler(guard=guard, config=config)
    _register_jobs(scheduler, guard)

    driver = TickDriver(scheduler.heartbeat, guard, tick_rate=config.tick_rate)
    guard.heartbeat("boot")

    max_ticks = args.ticks if args.dry_run else None
    driver.run(max_ticks=max_ticks)

    if args.dry_run and not guard.should_stop:
        guard.request_shutdown("dry-run")
    scheduler.cancel_all()

    return 0 if not guard.has_errors else 1


def main() -> int:
    return run()


if __name__ == "__main__":
    sys.exit(main())
