"""CycleMetrics — running per-domain delivery totals.

Subscribes to ``CycleReporter.on_result()`` and aggregates cycles,
violations and dispatch outcomes per domain.
"""

from __future__ import annotations

from dataclasses import dataclass

from plantguard.core.types import Domain, Severity
from plantguard.engine.types import CycleResult, CycleStatus


@dataclass
class DomainStats:
    """Aggregated statistics for one domain."""

    domain: Domain
    cycles: int = 0
    failed_cycles: int = 0
    violations: int = 0
    critical: int = 0
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    simulated: int = 0
    last_finished_at: float = 0.0

    @property
    def delivery_rate(self) -> float:
        if self.attempted == 0:
            return 0.0
        return (self.succeeded + self.simulated) / self.attempted


class CycleMetrics:
    """Collects per-domain totals from finished cycles.

    Usage::

        metrics = CycleMetrics()
        reporter.on_result(metrics.on_cycle_result)
        metrics.summary()
    """

    def __init__(self) -> None:
        self._stats: dict[Domain, DomainStats] = {}

    def on_cycle_result(self, result: CycleResult) -> None:
        """Callback for ``CycleReporter.on_result()``."""
        stats = self._stats.setdefault(result.domain, DomainStats(domain=result.domain))
        stats.cycles += 1
        if result.status == CycleStatus.FAILED:
            stats.failed_cycles += 1
        stats.violations += len(result.violations)
        stats.critical += sum(1 for v in result.violations if v.severity == Severity.CRITICAL)
        stats.attempted += result.attempted
        stats.succeeded += result.succeeded
        stats.failed += result.failed
        stats.simulated += result.simulated
        stats.last_finished_at = result.finished_at or stats.last_finished_at

    def domain_stats(self) -> dict[Domain, DomainStats]:
        return dict(self._stats)

    def summary(self) -> dict[str, object]:
        totals = {
            "cycles": 0,
            "failed_cycles": 0,
            "violations": 0,
            "attempted": 0,
            "succeeded": 0,
            "failed": 0,
            "simulated": 0,
        }
        for stats in self._stats.values():
            for key in totals:
                totals[key] += getattr(stats, key)
        return {
            **totals,
            "domains": {
                d.value: {"cycles": s.cycles, "violations": s.violations, "attempted": s.attempted}
                for d, s in self._stats.items()
            },
        }
