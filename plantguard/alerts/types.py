"""Domain types for the alert delivery subsystem."""

from __future__ import annotations

import time
from enum import StrEnum

from pydantic import BaseModel, Field

from plantguard.core.types import Channel, Recipient, Violation


class DeliveryStatus(StrEnum):
    """Terminal outcome of one delivery try."""

    SUCCESS = "success"
    FAILED = "failed"
    SIMULATED = "simulated"


class GatewayResult(BaseModel):
    """What a delivery gateway reports for one outbound message."""

    success: bool
    simulated: bool = False
    message_id: str | None = None
    error: str | None = None


class DeliveryOutcome(BaseModel):
    """Channel dispatcher result for one (destination, channel) send."""

    status: DeliveryStatus
    reason: str = ""
    message_id: str | None = None
    attempts: int = 1

    @classmethod
    def failed(cls, reason: str, attempts: int = 1) -> DeliveryOutcome:
        return cls(status=DeliveryStatus.FAILED, reason=reason, attempts=attempts)


class Route(BaseModel):
    """A recipient and the channels an alert must reach them on."""

    recipient: Recipient
    channels: tuple[Channel, ...]


class DispatchAttempt(BaseModel):
    """One (violation, recipient, channel) delivery try."""

    parameter: str
    recipient_id: str
    channel: Channel
    outcome: DeliveryOutcome
    timestamp: float = Field(default_factory=time.time)


class DispatchSummary(BaseModel):
    """Per-alert fan-out outcome. ``violation`` is None for broadcasts."""

    violation: Violation | None = None
    attempts: list[DispatchAttempt] = Field(default_factory=list)

    def _count(self, status: DeliveryStatus) -> int:
        return sum(1 for a in self.attempts if a.outcome.status == status)

    @property
    def attempted(self) -> int:
        return len(self.attempts)

    @property
    def succeeded(self) -> int:
        return self._count(DeliveryStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return self._count(DeliveryStatus.FAILED)

    @property
    def simulated(self) -> int:
        return self._count(DeliveryStatus.SIMULATED)

    def counts(self) -> dict[str, int]:
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "simulated": self.simulated,
        }
