"""Convenience factory for wiring the evaluation + dispatch engine."""

from __future__ import annotations

from dataclasses import dataclass

from plantguard.alerts.coordinator import DispatchCoordinator
from plantguard.alerts.dispatcher import ChannelDispatcher
from plantguard.alerts.gateways import DeliveryGateway, create_gateway
from plantguard.alerts.recipients import RecipientResolver
from plantguard.alerts.retry import create_retry_policy
from plantguard.core.config import Settings
from plantguard.engine.cycle import CycleRunner
from plantguard.engine.metrics import CycleMetrics
from plantguard.engine.reporter import CycleReporter
from plantguard.engine.scheduler import CycleScheduler
from plantguard.evaluation.classifier import AlertClassifier
from plantguard.evaluation.evaluators import build_evaluators
from plantguard.prediction.service import Advisor, create_advisor
from plantguard.storage.base import RecipientDirectory, TelemetryStore


@dataclass
class EngineStack:
    """Everything ``create_engine`` wired, for lifecycle and inspection."""

    scheduler: CycleScheduler
    runner: CycleRunner
    coordinator: DispatchCoordinator
    reporter: CycleReporter
    metrics: CycleMetrics
    gateway: DeliveryGateway
    advisor: Advisor

    async def close(self) -> None:
        await self.scheduler.stop()
        await self.gateway.close()
        await self.advisor.close()


def create_engine(
    settings: Settings,
    store: TelemetryStore,
    directory: RecipientDirectory,
    gateway: DeliveryGateway | None = None,
    advisor: Advisor | None = None,
) -> EngineStack:
    """Build the scheduler and its collaborators from settings.

    The delivery gateway is chosen here, once: Twilio when credentials are
    configured, the simulated gateway otherwise.
    """
    gateway = gateway or create_gateway(settings.twilio)
    advisor = advisor or create_advisor(settings.prediction)

    dispatcher = ChannelDispatcher(
        gateway,
        timeout_secs=settings.delivery.send_timeout_secs,
        retry_policy=create_retry_policy(settings.delivery.retry),
    )
    coordinator = DispatchCoordinator(
        dispatcher,
        max_concurrency=settings.delivery.max_concurrent_sends,
    )

    evaluators = {
        domain: evaluator
        for domain, evaluator in build_evaluators(settings.domains).items()
        if settings.domains.for_domain(domain).enabled
    }

    runner = CycleRunner(
        store=store,
        directory=directory,
        evaluators=evaluators,
        classifier=AlertClassifier(store),
        resolver=RecipientResolver(),
        coordinator=coordinator,
        advisor=advisor,
    )

    reporter = CycleReporter()
    metrics = CycleMetrics()
    reporter.on_result(metrics.on_cycle_result)

    scheduler = CycleScheduler(
        runner=runner,
        domains=evaluators,
        interval_secs=settings.scheduler.interval_secs,
        reporter=reporter,
    )

    return EngineStack(
        scheduler=scheduler,
        runner=runner,
        coordinator=coordinator,
        reporter=reporter,
        metrics=metrics,
        gateway=gateway,
        advisor=advisor,
    )
