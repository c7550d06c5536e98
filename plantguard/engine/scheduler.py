"""CycleScheduler — fixed-interval ticks with per-domain overlap prevention."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable
from enum import StrEnum

import structlog

from plantguard.core.logging import cycle_context
from plantguard.core.types import Domain
from plantguard.engine.cycle import CycleRunner
from plantguard.engine.reporter import CycleReporter
from plantguard.engine.types import CycleResult

logger = structlog.get_logger(__name__)


class CycleState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"


class DomainCycleState:
    """Idle/Running flag for one domain.

    ``try_begin`` checks and sets without yielding to the event loop, so two
    ticks can never both move the same domain to RUNNING.
    """

    def __init__(self, domain: Domain) -> None:
        self.domain = domain
        self._state = CycleState.IDLE
        self.runs = 0
        self.skipped = 0
        self.last_started_at: float = 0.0
        self.last_finished_at: float = 0.0

    @property
    def state(self) -> CycleState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state == CycleState.RUNNING

    def try_begin(self) -> bool:
        if self._state == CycleState.RUNNING:
            self.skipped += 1
            return False
        self._state = CycleState.RUNNING
        self.runs += 1
        self.last_started_at = time.time()
        return True

    def finish(self) -> None:
        self._state = CycleState.IDLE
        self.last_finished_at = time.time()


class CycleScheduler:
    """Starts one cycle per idle domain on every tick.

    Usage::

        scheduler = CycleScheduler(runner, domains, interval_secs=30)
        await scheduler.start()
        # ...
        await scheduler.stop()
    """

    def __init__(
        self,
        runner: CycleRunner,
        domains: Iterable[Domain],
        interval_secs: float = 30.0,
        reporter: CycleReporter | None = None,
    ) -> None:
        self._runner = runner
        self._interval_secs = interval_secs
        self._reporter = reporter or CycleReporter()
        self._states: dict[Domain, DomainCycleState] = {
            d: DomainCycleState(d) for d in domains
        }
        self._task: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[CycleResult]] = set()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def states(self) -> dict[Domain, DomainCycleState]:
        return dict(self._states)

    @property
    def reporter(self) -> CycleReporter:
        return self._reporter

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "scheduler_started",
            domains=[d.value for d in self._states],
            interval_secs=self._interval_secs,
        )

    async def stop(self) -> None:
        """Stop ticking and let in-flight cycles run to completion."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)
        logger.info("scheduler_stopped")

    def tick(self) -> list[asyncio.Task[CycleResult]]:
        """Start a cycle for every idle domain; skip domains still running."""
        started: list[asyncio.Task[CycleResult]] = []
        for domain, state in self._states.items():
            if not state.try_begin():
                logger.warning("tick_skipped", domain=domain, skipped=state.skipped)
                continue
            task = asyncio.create_task(self._run_cycle(state))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
            started.append(task)
        return started

    async def run_once(self) -> list[CycleResult]:
        """Tick once and wait for the cycles it started."""
        return list(await asyncio.gather(*self.tick()))

    # ── Internal loop ───────────────────────────────────────────

    async def _run_cycle(self, state: DomainCycleState) -> CycleResult:
        result = CycleResult(domain=state.domain, started_at=state.last_started_at)
        try:
            with cycle_context(state.domain, state.runs):
                try:
                    await self._runner.run(state.domain, result)
                except Exception as exc:
                    logger.exception(
                        "cycle_error",
                        domain=state.domain,
                        snapshot_id=result.snapshot_id,
                        violations=len(result.violations),
                    )
                    result.fail(exc)
                await self._reporter.report(result)
            return result
        finally:
            state.finish()

    async def _loop(self) -> None:
        while self._running:
            try:
                self.tick()
            except Exception:
                logger.exception("scheduler_tick_error")
            try:
                await asyncio.sleep(self._interval_secs)
            except asyncio.CancelledError:
                break
