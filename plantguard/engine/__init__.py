"""Cycle scheduling, execution, and reporting."""

from plantguard.engine.cycle import CycleRunner
from plantguard.engine.factory import EngineStack, create_engine
from plantguard.engine.metrics import CycleMetrics, DomainStats
from plantguard.engine.reporter import CycleReporter
from plantguard.engine.scheduler import CycleScheduler, CycleState, DomainCycleState
from plantguard.engine.types import CycleResult, CycleStatus

__all__ = [
    "CycleMetrics",
    "CycleReporter",
    "CycleResult",
    "CycleRunner",
    "CycleScheduler",
    "CycleState",
    "CycleStatus",
    "DomainCycleState",
    "DomainStats",
    "EngineStack",
    "create_engine",
]
