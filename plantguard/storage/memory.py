"""In-memory store and directory — used by the runner script and tests."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import structlog

from plantguard.core.config import RecipientConfig
from plantguard.core.types import Channel, Domain, Recipient, Snapshot, Violation
from plantguard.storage.base import RecipientDirectory, TelemetryStore
from plantguard.storage.exceptions import SnapshotNotFoundError

logger = structlog.get_logger(__name__)


class InMemoryTelemetryStore(TelemetryStore):
    """Keeps every ingested snapshot; serves deep copies of the latest per domain.

    Callers never share a snapshot object with the store, so annotations only
    land through ``append_violations``.
    """

    def __init__(self, snapshots: Iterable[Snapshot] = ()) -> None:
        self._snapshots: dict[str, Snapshot] = {}
        self._latest: dict[Domain, str] = {}
        self._lock = asyncio.Lock()
        for snap in snapshots:
            self._put(snap)

    def _put(self, snapshot: Snapshot) -> None:
        stored = snapshot.model_copy(deep=True)
        self._snapshots[stored.id] = stored
        current = self._latest.get(stored.domain)
        if current is None or self._snapshots[current].captured_at <= stored.captured_at:
            self._latest[stored.domain] = stored.id

    async def ingest(self, snapshot: Snapshot) -> None:
        async with self._lock:
            self._put(snapshot)

    async def get_latest_snapshot(self, domain: Domain) -> Snapshot | None:
        async with self._lock:
            snap_id = self._latest.get(domain)
            if snap_id is None:
                return None
            return self._snapshots[snap_id].model_copy(deep=True)

    async def get_snapshot(self, snapshot_id: str) -> Snapshot | None:
        async with self._lock:
            snap = self._snapshots.get(snapshot_id)
            return snap.model_copy(deep=True) if snap else None

    async def append_violations(self, snapshot_id: str, violations: list[Violation]) -> None:
        async with self._lock:
            snap = self._snapshots.get(snapshot_id)
            if snap is None:
                raise SnapshotNotFoundError(f"Unknown snapshot {snapshot_id}")
            # Re-check under the lock: a key is stored at most once.
            seen = {v.key for v in snap.violations}
            added = 0
            for violation in violations:
                if violation.key in seen:
                    continue
                snap.violations.append(violation.model_copy())
                seen.add(violation.key)
                added += 1
            logger.debug(
                "violations_appended",
                snapshot_id=snapshot_id,
                added=added,
                total=len(snap.violations),
            )


class InMemoryRecipientDirectory(RecipientDirectory):
    """Static recipient list, typically built from settings."""

    def __init__(self, recipients: Iterable[Recipient] = ()) -> None:
        self._recipients = list(recipients)

    @classmethod
    def from_config(cls, entries: Iterable[RecipientConfig]) -> InMemoryRecipientDirectory:
        recipients = [
            Recipient(
                id=e.id,
                name=e.name,
                phone=e.phone,
                sms=e.sms,
                whatsapp=e.whatsapp,
                primary_channel=Channel(e.primary_channel) if e.primary_channel else None,
                active=e.active,
                department=e.department,
            )
            for e in entries
        ]
        return cls(recipients)

    async def list_active_recipients(self) -> list[Recipient]:
        return [r.model_copy() for r in self._recipients if r.active]
