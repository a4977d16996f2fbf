#!/usr/bin/env python3
"""Agent entrypoint — schedules every probe definition and alerts until interrupted.

Usage::

    # Run with default config
    python scripts/run.py

    # Custom config file
    python scripts/run.py --config config/settings.yaml

    # Override log level
    python scripts/run.py --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import structlog

from src.core.config import load_settings
from src.core.logging import setup_logging
from src.scheduler.supervisor import supervise

logger = structlog.get_logger(__name__)


async def run(args: argparse.Namespace) -> int:
    """Supervise the agent until SIGINT/SIGTERM; return its exit code."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level)

    logger.info(
        "agent_starting",
        definitions_dir=settings.schedule.definitions_dir,
        results_dir=settings.schedule.results_dir,
        min_severity=settings.alerts.min_severity,
    )

    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows: signal handlers not supported on ProactorEventLoop
            pass

    outcome = await supervise(settings, stop_event)
    if not outcome.ok:
        print(f"agent failed: {outcome.error}", file=sys.stderr)
    return outcome.exit_code


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run scheduled Globalping probes and send Telegram alerts.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    args = parser.parse_args()

    try:
        code = asyncio.run(run(args))
    except KeyboardInterrupt:
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    main()
