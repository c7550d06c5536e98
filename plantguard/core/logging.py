"""Structured logging for the engine: stderr events plus an optional cycle-record file."""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager
from pathlib import Path

import structlog

from plantguard.core.config import get_settings
from plantguard.core.types import Domain

CYCLE_LOGGER = "cycle_log"
_CYCLE_HANDLER = "plantguard.cycle_file"

_NOISY_LOGGERS = ("aiohttp.access", "httpx", "httpcore")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _formatter(renderer: structlog.types.Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def _attach_cycle_file(path: str) -> None:
    """Route ``cycle_log`` records to *path* as JSON lines, replacing any earlier file."""
    cycle_logger = logging.getLogger(CYCLE_LOGGER)
    for handler in list(cycle_logger.handlers):
        if handler.get_name() == _CYCLE_HANDLER:
            cycle_logger.removeHandler(handler)
            handler.close()
    if not path:
        cycle_logger.setLevel(logging.NOTSET)
        return

    Path(path).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.set_name(_CYCLE_HANDLER)
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    cycle_logger.addHandler(handler)
    # Every cycle record reaches the file whatever the console level.
    cycle_logger.setLevel(logging.INFO)


def setup_logging(
    level: str | None = None,
    fmt: str | None = None,
    cycle_log_file: str | None = None,
) -> None:
    """Configure structlog with JSON or console renderer.

    Args:
        level: Log level override (e.g. "DEBUG"). Uses config if None.
        fmt: Renderer format override ("json" or "console"). Uses config if None.
        cycle_log_file: Cycle-record file override. Uses config if None,
            an empty string disables the file.
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.logging.level).upper(), logging.INFO)
    log_format = fmt or settings.logging.format
    cycle_path = settings.logging.cycle_log_file if cycle_log_file is None else cycle_log_file

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter(renderer))
    handler.setLevel(log_level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    _attach_cycle_file(cycle_path)

    # aiohttp/httpx chatter stays out of alert logs unless debugging.
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))


def cycle_context(domain: Domain, run: int) -> AbstractContextManager[None]:
    """Bind the domain and run number to every event logged inside one cycle."""
    return structlog.contextvars.bound_contextvars(cycle_domain=domain.value, cycle_run=run)
