"""Domain types for plant telemetry, violations, and recipients."""

from __future__ import annotations

import time
import uuid
from enum import IntEnum, StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class Domain(StrEnum):
    """Telemetry domain monitored by its own evaluation cycle."""

    EMISSION = "emission"
    EQUIPMENT = "equipment"
    LOAD = "load"
    ASH = "ash"


class Bound(StrEnum):
    """Which side of the threshold is a breach."""

    MAX = "max"  # upper-bounded, breach when above
    MIN = "min"  # lower-bounded, breach when below


class Severity(IntEnum):
    """Violation severity, ordered so comparisons work naturally."""

    NORMAL = 0
    WARNING = 1
    CRITICAL = 2


class Channel(StrEnum):
    """Delivery medium."""

    SMS = "sms"
    WHATSAPP = "whatsapp"


# ── Telemetry ───────────────────────────────────────────────────


class Reading(BaseModel):
    """A single parameter observation.

    ``threshold=None`` defers to the configured default for the parameter.
    """

    value: float
    unit: str = ""
    threshold: float | None = None


def _pct(current: float | None, capacity: float | None, threshold: float | None) -> Reading | None:
    if current is None or not capacity:
        return None
    return Reading(value=round(current / capacity * 100.0, 2), unit="%", threshold=threshold)


class EmissionReadings(BaseModel):
    """Stack emission concentrations."""

    domain: Literal["emission"] = "emission"
    sox: Reading | None = None
    nox: Reading | None = None
    co2: Reading | None = None
    pm: Reading | None = None
    co: Reading | None = None
    location: str = "Main Stack"
    plant_id: str = "PLANT-01"

    def parameters(self) -> dict[str, Reading]:
        named = {"sox": self.sox, "nox": self.nox, "co2": self.co2, "pm": self.pm, "co": self.co}
        return {k: v for k, v in named.items() if v is not None}


class EquipmentReadings(BaseModel):
    """Condition readings for one piece of equipment."""

    domain: Literal["equipment"] = "equipment"
    equipment_id: str = ""
    equipment_name: str = ""
    equipment_type: str = ""
    temperature: Reading | None = None
    vibration: Reading | None = None
    pressure: Reading | None = None
    efficiency: Reading | None = None

    def parameters(self) -> dict[str, Reading]:
        named = {
            "temperature": self.temperature,
            "vibration": self.vibration,
            "pressure": self.pressure,
            "efficiency": self.efficiency,
        }
        return {k: v for k, v in named.items() if v is not None}


class LoadReadings(BaseModel):
    """Grid demand against installed capacity (MW)."""

    domain: Literal["load"] = "load"
    demand_mw: float | None = None
    capacity_mw: float | None = 2100.0
    generation_mw: float | None = None
    load_threshold_pct: float | None = None

    def parameters(self) -> dict[str, Reading]:
        reading = _pct(self.demand_mw, self.capacity_mw, self.load_threshold_pct)
        return {"load_pct": reading} if reading else {}


class AshReadings(BaseModel):
    """Fly ash and bottom ash storage levels (tonnes)."""

    domain: Literal["ash"] = "ash"
    fly_ash_stored: float | None = None
    fly_ash_capacity: float | None = 50000.0
    bottom_ash_stored: float | None = None
    bottom_ash_capacity: float | None = 15000.0

    def parameters(self) -> dict[str, Reading]:
        named = {
            "fly_ash_pct": _pct(self.fly_ash_stored, self.fly_ash_capacity, None),
            "bottom_ash_pct": _pct(self.bottom_ash_stored, self.bottom_ash_capacity, None),
        }
        return {k: v for k, v in named.items() if v is not None}


DomainReadings = Annotated[
    EmissionReadings | EquipmentReadings | LoadReadings | AshReadings,
    Field(discriminator="domain"),
]


# ── Violations ──────────────────────────────────────────────────


class Breach(BaseModel):
    """A parameter outside its threshold, as reported by a domain evaluator."""

    parameter: str
    value: float
    threshold: float
    unit: str = ""
    bound: Bound = Bound.MAX
    severity: Severity


class Violation(BaseModel):
    """A classified breach raised against a specific snapshot."""

    snapshot_id: str
    domain: Domain
    parameter: str
    value: float
    threshold: float
    unit: str = ""
    bound: Bound = Bound.MAX
    severity: Severity
    message: str = ""
    raised_at: float = Field(default_factory=time.time)

    @property
    def key(self) -> tuple[str, str]:
        """Identity used for at-most-once raising."""
        return (self.snapshot_id, self.parameter)

    def summary(self) -> dict[str, object]:
        return {
            "parameter": self.parameter,
            "value": self.value,
            "threshold": self.threshold,
            "unit": self.unit,
            "severity": self.severity.name,
        }


class Snapshot(BaseModel):
    """The most recent telemetry reading for one domain."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    readings: DomainReadings
    captured_at: float = Field(default_factory=time.time)
    violations: list[Violation] = Field(default_factory=list)

    @property
    def domain(self) -> Domain:
        return Domain(self.readings.domain)

    def parameters(self) -> dict[str, Reading]:
        return self.readings.parameters()

    def raised_parameters(self) -> set[str]:
        return {v.parameter for v in self.violations if v.snapshot_id == self.id}


# ── Recipients ──────────────────────────────────────────────────


class Recipient(BaseModel):
    """A person who may receive alerts, with per-channel opt-in."""

    id: str
    name: str
    phone: str = ""
    sms: bool = False
    whatsapp: bool = False
    primary_channel: Channel | None = None
    active: bool = True
    department: str = ""

    def opted_in(self, channel: Channel) -> bool:
        return self.sms if channel == Channel.SMS else self.whatsapp

    @property
    def opted_channels(self) -> tuple[Channel, ...]:
        return tuple(ch for ch in Channel if self.opted_in(ch))
