"""Observability boundary for finished cycles."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from plantguard.core.logging import CYCLE_LOGGER
from plantguard.engine.types import CycleResult, CycleStatus

# Dedicated structured logger for cycle records.
cycle_logger = structlog.get_logger(CYCLE_LOGGER)

logger = structlog.get_logger(__name__)

CycleResultCallback = Callable[[CycleResult], Awaitable[None] | None]


class CycleReporter:
    """Logs every CycleResult as one structured record and fans it out to callbacks."""

    def __init__(self) -> None:
        self._callbacks: list[CycleResultCallback] = []

    def on_result(self, callback: CycleResultCallback) -> None:
        """Register a callback for finished cycles."""
        self._callbacks.append(callback)

    async def report(self, result: CycleResult) -> None:
        record = result.as_record()
        if result.status == CycleStatus.FAILED:
            cycle_logger.error("cycle_failed", **record)
        else:
            cycle_logger.info("cycle_completed", **record)

        for cb in self._callbacks:
            try:
                outcome = cb(result)
                if asyncio.iscoroutine(outcome):
                    await outcome
            except Exception:
                logger.exception("cycle_callback_error", domain=result.domain)
