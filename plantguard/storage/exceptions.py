"""Exception hierarchy for telemetry and recipient storage collaborators."""

from __future__ import annotations


class StorageError(Exception):
    """Base exception for store and directory errors."""


class SnapshotNotFoundError(StorageError):
    """An annotation targeted a snapshot the store does not hold."""


class RecipientDirectoryError(StorageError):
    """The recipient directory could not be read."""
