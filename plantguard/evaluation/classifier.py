"""AlertClassifier — turns breaches into new, persisted violations."""

from __future__ import annotations

import time

import structlog

from plantguard.core.types import Breach, Severity, Snapshot, Violation
from plantguard.evaluation.formatters import format_violation
from plantguard.storage.base import TelemetryStore

logger = structlog.get_logger(__name__)


class AlertClassifier:
    """Raises each (snapshot, parameter) violation at most once.

    New violations are persisted through the telemetry store *before* they are
    returned, so a failure anywhere later in the cycle (or a restart) cannot
    cause the same breach to be raised and dispatched again. If persistence
    fails the error propagates and nothing is returned for dispatch.
    """

    def __init__(self, store: TelemetryStore) -> None:
        self._store = store

    def new_violations(self, snapshot: Snapshot, breaches: list[Breach]) -> list[Violation]:
        """Build violations for breaches not yet annotated on *snapshot* (no side effects)."""
        raised = snapshot.raised_parameters()
        now = time.time()
        fresh: list[Violation] = []
        for breach in breaches:
            if breach.severity == Severity.NORMAL or breach.parameter in raised:
                continue
            raised.add(breach.parameter)
            fresh.append(Violation(
                snapshot_id=snapshot.id,
                domain=snapshot.domain,
                parameter=breach.parameter,
                value=breach.value,
                threshold=breach.threshold,
                unit=breach.unit,
                bound=breach.bound,
                severity=breach.severity,
                message=format_violation(snapshot, breach),
                raised_at=now,
            ))
        return fresh

    async def classify(self, snapshot: Snapshot, breaches: list[Breach]) -> list[Violation]:
        """Return the new violations, annotating and persisting them first."""
        fresh = self.new_violations(snapshot, breaches)
        if not fresh:
            if breaches:
                logger.debug(
                    "violations_already_raised",
                    domain=snapshot.domain,
                    snapshot_id=snapshot.id,
                    breaches=len(breaches),
                )
            return []

        await self._store.append_violations(snapshot.id, fresh)
        snapshot.violations.extend(fresh)

        logger.info(
            "violations_raised",
            domain=snapshot.domain,
            snapshot_id=snapshot.id,
            parameters=[v.parameter for v in fresh],
            critical=sum(1 for v in fresh if v.severity == Severity.CRITICAL),
        )
        return fresh
