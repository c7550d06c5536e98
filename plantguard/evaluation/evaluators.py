"""Per-domain threshold evaluators.

Each evaluator is a pure function of a snapshot: no I/O, no shared mutable
state, so the four domains can be evaluated concurrently.
"""

from __future__ import annotations

from typing import ClassVar

from plantguard.core.config import DomainRulesConfig, DomainsConfig, get_settings
from plantguard.core.types import Bound, Breach, Domain, Severity, Snapshot
from plantguard.evaluation.exceptions import EvaluationError
from plantguard.evaluation.severity import classify_severity


class DomainEvaluator:
    """Reports the parameters of a snapshot that breach their thresholds.

    Subclasses declare the domain, the parameters checked (in report order)
    and which of them are lower-bounded. The snapshot's own threshold wins
    over the configured default; a parameter with neither, or absent from
    the snapshot, is skipped.
    """

    domain: ClassVar[Domain]
    parameters: ClassVar[tuple[str, ...]] = ()
    lower_bounded: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, rules: DomainRulesConfig | None = None) -> None:
        self._rules = rules or get_settings().domains.for_domain(self.domain)

    @property
    def rules(self) -> DomainRulesConfig:
        return self._rules

    def bound_for(self, parameter: str) -> Bound:
        return Bound.MIN if parameter in self.lower_bounded else Bound.MAX

    def evaluate(self, snapshot: Snapshot) -> list[Breach]:
        if snapshot.domain != self.domain:
            raise EvaluationError(
                f"{type(self).__name__} cannot evaluate a {snapshot.domain} snapshot"
            )

        readings = snapshot.parameters()
        breaches: list[Breach] = []
        for name in self.parameters:
            reading = readings.get(name)
            if reading is None:
                continue
            threshold = (
                reading.threshold
                if reading.threshold is not None
                else self._rules.thresholds.get(name)
            )
            if threshold is None:
                continue

            bound = self.bound_for(name)
            severity = classify_severity(
                reading.value, threshold, self._rules.critical_multiplier, bound
            )
            if severity == Severity.NORMAL:
                continue
            breaches.append(Breach(
                parameter=name,
                value=reading.value,
                threshold=threshold,
                unit=reading.unit,
                bound=bound,
                severity=severity,
            ))
        return breaches


class EmissionEvaluator(DomainEvaluator):
    """Stack gas concentrations — all upper-bounded."""

    domain = Domain.EMISSION
    parameters = ("sox", "nox", "co2", "pm", "co")


class EquipmentEvaluator(DomainEvaluator):
    """Equipment condition — efficiency must stay above its minimum."""

    domain = Domain.EQUIPMENT
    parameters = ("temperature", "vibration", "pressure", "efficiency")
    lower_bounded = frozenset({"efficiency"})


class LoadEvaluator(DomainEvaluator):
    domain = Domain.LOAD
    parameters = ("load_pct",)


class AshEvaluator(DomainEvaluator):
    domain = Domain.ASH
    parameters = ("fly_ash_pct", "bottom_ash_pct")


_EVALUATORS: dict[Domain, type[DomainEvaluator]] = {
    Domain.EMISSION: EmissionEvaluator,
    Domain.EQUIPMENT: EquipmentEvaluator,
    Domain.LOAD: LoadEvaluator,
    Domain.ASH: AshEvaluator,
}


def build_evaluators(config: DomainsConfig | None = None) -> dict[Domain, DomainEvaluator]:
    """Instantiate one evaluator per domain from the domain rules."""
    cfg = config or get_settings().domains
    return {
        domain: cls(cfg.for_domain(domain))
        for domain, cls in _EVALUATORS.items()
    }
