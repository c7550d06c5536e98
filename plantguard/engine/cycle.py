"""CycleRunner — one evaluation + dispatch pass for one domain."""

from __future__ import annotations

import asyncio

import structlog

from plantguard.alerts.coordinator import DispatchCoordinator
from plantguard.alerts.recipients import RecipientResolver
from plantguard.alerts.types import DispatchSummary
from plantguard.core.types import Domain, Recipient, Snapshot, Violation
from plantguard.engine.types import CycleResult
from plantguard.evaluation.classifier import AlertClassifier
from plantguard.evaluation.evaluators import DomainEvaluator
from plantguard.evaluation.formatters import append_advice
from plantguard.prediction.service import Advisor
from plantguard.storage.base import RecipientDirectory, TelemetryStore

logger = structlog.get_logger(__name__)


class CycleRunner:
    """Fetch → evaluate → classify/persist → advise → resolve → dispatch.

    Errors from the store, the directory or an evaluator propagate; the
    scheduler turns them into a failed cycle. Delivery failures never do.
    Alert text carries heuristic advice; the remote prediction is only
    requested in the background and never awaited here.
    """

    def __init__(
        self,
        store: TelemetryStore,
        directory: RecipientDirectory,
        evaluators: dict[Domain, DomainEvaluator],
        classifier: AlertClassifier,
        resolver: RecipientResolver,
        coordinator: DispatchCoordinator,
        advisor: Advisor | None = None,
    ) -> None:
        self._store = store
        self._directory = directory
        self._evaluators = evaluators
        self._classifier = classifier
        self._resolver = resolver
        self._coordinator = coordinator
        self._advisor = advisor

    @property
    def domains(self) -> list[Domain]:
        return list(self._evaluators)

    async def run(self, domain: Domain, result: CycleResult | None = None) -> CycleResult:
        """Run one cycle, filling in *result* as each stage completes.

        When *result* is supplied it still carries the snapshot id and the
        violations already raised if a later stage raises.
        """
        if result is None:
            result = CycleResult(domain=domain)

        snapshot = await self._store.get_latest_snapshot(domain)
        if snapshot is None:
            logger.debug("no_snapshot", domain=domain)
            result.finish()
            return result
        result.snapshot_id = snapshot.id

        breaches = self._evaluators[domain].evaluate(snapshot)
        violations = await self._classifier.classify(snapshot, breaches)
        result.violations = violations
        if not violations:
            result.finish()
            return result

        if self._advisor is not None:
            result.advice = self._advisor.immediate(domain, snapshot).as_text()
            self._advisor.request(domain, snapshot)

        recipients = await self._directory.list_active_recipients()
        summaries = await asyncio.gather(*(
            self._dispatch(snapshot, violation, recipients, result.advice)
            for violation in violations
        ))
        result.summaries = list(summaries)
        result.finish()
        return result

    async def _dispatch(
        self,
        snapshot: Snapshot,
        violation: Violation,
        recipients: list[Recipient],
        advice: str,
    ) -> DispatchSummary:
        routes = self._resolver.resolve(violation.severity, recipients)
        if not routes:
            logger.info(
                "no_recipients",
                domain=snapshot.domain,
                parameter=violation.parameter,
                severity=violation.severity.name,
            )
        message = append_advice(violation.message, advice)
        return await self._coordinator.dispatch(violation, routes, message=message)
