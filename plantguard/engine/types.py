"""Cycle result types."""

from __future__ import annotations

import datetime
import time
from enum import StrEnum

from pydantic import BaseModel, Field

from plantguard.alerts.types import DispatchSummary
from plantguard.core.types import Domain, Violation


class CycleStatus(StrEnum):
    COMPLETED = "completed"
    FAILED = "failed"


class CycleResult(BaseModel):
    """Everything one evaluation+dispatch pass of one domain produced.

    Discarded after reporting; only the violation annotations outlive it.
    """

    domain: Domain
    snapshot_id: str | None = None
    status: CycleStatus = CycleStatus.COMPLETED
    error: str = ""
    started_at: float = Field(default_factory=time.time)
    finished_at: float | None = None
    violations: list[Violation] = Field(default_factory=list)
    summaries: list[DispatchSummary] = Field(default_factory=list)
    advice: str = ""

    def fail(self, exc: BaseException) -> None:
        """Mark the cycle failed, keeping whatever it had already raised."""
        self.finish(CycleStatus.FAILED, error=f"{type(exc).__name__}: {exc}")

    def finish(self, status: CycleStatus = CycleStatus.COMPLETED, error: str = "") -> None:
        self.status = status
        self.error = error
        self.finished_at = time.time()

    @property
    def attempted(self) -> int:
        return sum(s.attempted for s in self.summaries)

    @property
    def succeeded(self) -> int:
        return sum(s.succeeded for s in self.summaries)

    @property
    def failed(self) -> int:
        return sum(s.failed for s in self.summaries)

    @property
    def simulated(self) -> int:
        return sum(s.simulated for s in self.summaries)

    def as_record(self) -> dict[str, object]:
        """Flat structured record for the observability boundary."""
        finished = self.finished_at or time.time()
        per_violation = {
            (s.violation.parameter if s.violation else "broadcast"): s.counts()
            for s in self.summaries
        }
        return {
            "domain": self.domain.value,
            "snapshot_id": self.snapshot_id,
            "status": self.status.value,
            "finished_at": datetime.datetime.fromtimestamp(finished, datetime.UTC).isoformat(),
            "duration_ms": round((finished - self.started_at) * 1000, 1),
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "simulated": self.simulated,
            "violations": [
                {**v.summary(), **per_violation.get(v.parameter, {})}
                for v in self.violations
            ],
            "error": self.error,
        }
