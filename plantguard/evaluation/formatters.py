"""Pure functions that turn breaches into SMS/WhatsApp-sized alert text."""

from __future__ import annotations

import datetime

from plantguard.core.types import (
    AshReadings,
    Bound,
    Breach,
    Domain,
    EmissionReadings,
    EquipmentReadings,
    LoadReadings,
    Snapshot,
)

# ── Labels ──────────────────────────────────────────────────────

_TITLES: dict[Domain, str] = {
    Domain.EMISSION: "Emission Threshold Exceeded",
    Domain.EQUIPMENT: "Maintenance Required",
    Domain.LOAD: "Load Warning",
    Domain.ASH: "Ash Management",
}

_ACTIONS: dict[Domain, str] = {
    Domain.EMISSION: "Immediate action required!",
    Domain.EQUIPMENT: "Schedule maintenance immediately.",
    Domain.LOAD: "Monitor grid stability.",
    Domain.ASH: "Disposal arrangements needed.",
}

_PARAMETER_LABELS: dict[str, str] = {
    "sox": "SOx",
    "nox": "NOx",
    "co2": "CO2",
    "pm": "PM",
    "co": "CO",
    "temperature": "Temperature",
    "vibration": "Vibration",
    "pressure": "Pressure",
    "efficiency": "Efficiency",
    "load_pct": "Load",
    "fly_ash_pct": "Fly Ash Storage",
    "bottom_ash_pct": "Bottom Ash Storage",
}


def parameter_label(parameter: str) -> str:
    return _PARAMETER_LABELS.get(parameter, parameter.replace("_", " ").title())


def _num(value: float) -> str:
    return f"{value:g}"


def _context_lines(snapshot: Snapshot) -> list[str]:
    readings = snapshot.readings
    if isinstance(readings, EmissionReadings):
        return [f"Location: {readings.location}"]
    if isinstance(readings, EquipmentReadings):
        name = readings.equipment_name or readings.equipment_id or "Unknown"
        if readings.equipment_type:
            name = f"{name} ({readings.equipment_type})"
        return [f"Equipment: {name}"]
    if isinstance(readings, LoadReadings):
        lines = []
        if readings.demand_mw is not None:
            lines.append(f"Current Load: {_num(readings.demand_mw)} MW")
        if readings.capacity_mw:
            lines.append(f"Capacity: {_num(readings.capacity_mw)} MW")
        return lines
    if isinstance(readings, AshReadings):
        return [
            f"Fly Ash: {_num(readings.fly_ash_stored or 0)}/{_num(readings.fly_ash_capacity or 0)} t",
            f"Bottom Ash: {_num(readings.bottom_ash_stored or 0)}/"
            f"{_num(readings.bottom_ash_capacity or 0)} t",
        ]
    return []


# ── Formatters ──────────────────────────────────────────────────


def format_violation(snapshot: Snapshot, breach: Breach) -> str:
    """Compose the alert text for one breach on *snapshot*."""
    domain = snapshot.domain
    unit = f" {breach.unit}" if breach.unit else ""
    limit = "Minimum" if breach.bound == Bound.MIN else "Threshold"
    captured = datetime.datetime.fromtimestamp(snapshot.captured_at, datetime.UTC)

    lines = [
        f"[{breach.severity.name}] PLANT ALERT - {_TITLES[domain]}",
        "",
        f"Parameter: {parameter_label(breach.parameter)}",
        f"Value: {_num(breach.value)}{unit}",
        f"{limit}: {_num(breach.threshold)}{unit}",
        *_context_lines(snapshot),
        f"Time: {captured:%Y-%m-%d %H:%M:%S} UTC",
        "",
        _ACTIONS[domain],
    ]
    return "\n".join(lines)


def append_advice(message: str, advice: str) -> str:
    """Attach advisory text to an alert message."""
    if not advice:
        return message
    return f"{message}\n\nAdvice: {advice}"


def format_broadcast(message: str, urgent: bool = False) -> str:
    """Prefix an operator broadcast."""
    prefix = "URGENT BROADCAST" if urgent else "PLANT BROADCAST"
    return f"{prefix} - {message}"
