"""Telemetry store and recipient directory interfaces."""

from plantguard.storage.base import RecipientDirectory, TelemetryStore
from plantguard.storage.exceptions import (
    RecipientDirectoryError,
    SnapshotNotFoundError,
    StorageError,
)
from plantguard.storage.memory import InMemoryRecipientDirectory, InMemoryTelemetryStore

__all__ = [
    "InMemoryRecipientDirectory",
    "InMemoryTelemetryStore",
    "RecipientDirectory",
    "RecipientDirectoryError",
    "SnapshotNotFoundError",
    "StorageError",
    "TelemetryStore",
]
