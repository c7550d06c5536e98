"""Threshold severity rule."""

from __future__ import annotations

from plantguard.core.types import Bound, Severity

DEFAULT_CRITICAL_MULTIPLIER = 1.2


def classify_severity(
    value: float,
    threshold: float,
    multiplier: float = DEFAULT_CRITICAL_MULTIPLIER,
    bound: Bound = Bound.MAX,
) -> Severity:
    """Classify an observation against its threshold.

    Upper-bounded: above ``threshold * multiplier`` is CRITICAL, above
    ``threshold`` is WARNING. Lower-bounded parameters mirror the rule with
    ``threshold / multiplier``. Equality is never a breach.
    """
    if bound == Bound.MIN:
        if value < threshold / multiplier:
            return Severity.CRITICAL
        if value < threshold:
            return Severity.WARNING
        return Severity.NORMAL

    if value > threshold * multiplier:
        return Severity.CRITICAL
    if value > threshold:
        return Severity.WARNING
    return Severity.NORMAL
