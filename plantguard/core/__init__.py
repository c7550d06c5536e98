"""Core module — config, types, logging."""

from plantguard.core.config import Settings, get_settings, load_settings, reset_settings
from plantguard.core.logging import setup_logging
from plantguard.core.types import (
    AshReadings,
    Bound,
    Breach,
    Channel,
    Domain,
    EmissionReadings,
    EquipmentReadings,
    LoadReadings,
    Reading,
    Recipient,
    Severity,
    Snapshot,
    Violation,
)

__all__ = [
    "AshReadings",
    "Bound",
    "Breach",
    "Channel",
    "Domain",
    "EmissionReadings",
    "EquipmentReadings",
    "LoadReadings",
    "Reading",
    "Recipient",
    "Settings",
    "Severity",
    "Snapshot",
    "Violation",
    "get_settings",
    "load_settings",
    "reset_settings",
    "setup_logging",
]
