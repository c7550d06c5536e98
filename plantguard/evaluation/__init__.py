"""Threshold evaluation and alert classification."""

from plantguard.evaluation.classifier import AlertClassifier
from plantguard.evaluation.evaluators import (
    AshEvaluator,
    DomainEvaluator,
    EmissionEvaluator,
    EquipmentEvaluator,
    LoadEvaluator,
    build_evaluators,
)
from plantguard.evaluation.exceptions import EvaluationError
from plantguard.evaluation.formatters import append_advice, format_broadcast, format_violation
from plantguard.evaluation.severity import classify_severity

__all__ = [
    "AlertClassifier",
    "AshEvaluator",
    "DomainEvaluator",
    "EmissionEvaluator",
    "EquipmentEvaluator",
    "EvaluationError",
    "LoadEvaluator",
    "append_advice",
    "build_evaluators",
    "classify_severity",
    "format_broadcast",
    "format_violation",
]
