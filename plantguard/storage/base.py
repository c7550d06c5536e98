"""Abstract telemetry store and recipient directory."""

from __future__ import annotations

import abc

from plantguard.core.types import Domain, Recipient, Snapshot, Violation


class TelemetryStore(abc.ABC):
    """Source of the latest snapshot per domain and sink for violation annotations."""

    @abc.abstractmethod
    async def get_latest_snapshot(self, domain: Domain) -> Snapshot | None:
        """Return the most recent snapshot for *domain*, or None if there is none."""

    @abc.abstractmethod
    async def append_violations(self, snapshot_id: str, violations: list[Violation]) -> None:
        """Persist *violations* as annotations of the given snapshot.

        Raises:
            SnapshotNotFoundError: the snapshot is unknown to the store.
            StorageError: the store is unavailable.
        """


class RecipientDirectory(abc.ABC):
    """Read-only source of alert recipients."""

    @abc.abstractmethod
    async def list_active_recipients(self) -> list[Recipient]:
        """Return every active recipient.

        Raises:
            RecipientDirectoryError: the directory is unavailable.
        """
