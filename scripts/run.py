#!/usr/bin/env python3
"""Engine entrypoint — wires the store, directory and scheduler and runs cycles.

Usage::

    # Run with default config, in-memory store seeded from a telemetry file
    python scripts/run.py --telemetry config/telemetry.example.yaml

    # Custom config file, single pass over every domain
    python scripts/run.py --config config/settings.yaml --once

    # Override log level
    python scripts/run.py --log-level DEBUG
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from pathlib import Path

import structlog
import yaml

from plantguard.core.config import load_settings
from plantguard.core.logging import setup_logging
from plantguard.core.types import Snapshot
from plantguard.engine.factory import create_engine
from plantguard.storage.memory import InMemoryRecipientDirectory, InMemoryTelemetryStore

logger = structlog.get_logger(__name__)


def load_snapshots(path: str | Path | None) -> list[Snapshot]:
    """Read a YAML list of snapshots (``readings`` carries the domain tag)."""
    if path is None:
        return []
    with open(path) as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, list):
        return []
    return [Snapshot(**item) for item in raw]


async def run(args: argparse.Namespace) -> int:
    """Start the scheduler and run until interrupted."""
    settings = load_settings(args.config)
    setup_logging(level=args.log_level, cycle_log_file=args.cycle_log)

    store = InMemoryTelemetryStore(load_snapshots(args.telemetry))
    directory = InMemoryRecipientDirectory.from_config(settings.recipients)
    stack = create_engine(settings, store, directory)

    logger.info(
        "engine_starting",
        domains=[d.value for d in stack.runner.domains],
        live_gateway=stack.gateway.configured,
        recipients=len(settings.recipients),
        interval_secs=settings.scheduler.interval_secs,
    )

    if not stack.runner.domains:
        logger.error("no_domains_enabled")
        print(
            "No domains enabled. Enable at least one domain in config/settings.yaml "
            "(domains.<name>.enabled).",
            file=sys.stderr,
        )
        await stack.close()
        return 1

    if args.once:
        await stack.scheduler.run_once()
        await stack.close()
        logger.info("engine_stopped", **stack.metrics.summary())
        return 0

    await stack.scheduler.start()

    # ── Wait for shutdown signal ─────────────────────────────────
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

    try:
        await stop_event.wait()
    except KeyboardInterrupt:
        logger.info("keyboard_interrupt")

    # ── Graceful shutdown ────────────────────────────────────────
    logger.info("engine_shutting_down")
    await stack.close()
    logger.info("engine_stopped", **stack.metrics.summary())
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run the plant threshold evaluation and alert dispatch engine.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to settings YAML (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--telemetry",
        default=None,
        help="YAML file of snapshots to seed the in-memory telemetry store",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle per domain and exit",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level override: DEBUG, INFO, WARNING, ERROR",
    )
    parser.add_argument(
        "--cycle-log",
        default=None,
        help="Append cycle records as JSON lines to this file",
    )
    args = parser.parse_args()

    code = asyncio.run(run(args))
    sys.exit(code)


if __name__ == "__main__":
    main()
