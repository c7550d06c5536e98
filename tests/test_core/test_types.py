"""Tests for telemetry and recipient types."""

from __future__ import annotations

from plantguard.core.types import (
    AshReadings,
    Channel,
    Domain,
    EmissionReadings,
    LoadReadings,
    Reading,
    Recipient,
    Severity,
    Snapshot,
    Violation,
)


class TestSnapshot:
    def test_domain_from_readings(self) -> None:
        snap = Snapshot(readings=LoadReadings(demand_mw=1000))
        assert snap.domain == Domain.LOAD

    def test_parses_tagged_dict(self) -> None:
        snap = Snapshot(
            id="s1",
            readings={"domain": "emission", "sox": {"value": 260, "unit": "mg/Nm3"}},
        )
        assert isinstance(snap.readings, EmissionReadings)
        assert snap.parameters()["sox"].value == 260

    def test_absent_parameters_omitted(self) -> None:
        readings = EmissionReadings(sox=Reading(value=1.0))
        assert list(readings.parameters()) == ["sox"]

    def test_raised_parameters_only_for_this_snapshot(self) -> None:
        snap = Snapshot(id="s1", readings=EmissionReadings())
        snap.violations.append(Violation(
            snapshot_id="s1", domain=Domain.EMISSION, parameter="sox",
            value=1, threshold=0, severity=Severity.WARNING,
        ))
        snap.violations.append(Violation(
            snapshot_id="other", domain=Domain.EMISSION, parameter="nox",
            value=1, threshold=0, severity=Severity.WARNING,
        ))
        assert snap.raised_parameters() == {"sox"}


class TestDerivedPercentages:
    def test_load_pct(self) -> None:
        readings = LoadReadings(demand_mw=2037, capacity_mw=2100)
        assert readings.parameters()["load_pct"].value == 97.0

    def test_load_zero_capacity_skipped(self) -> None:
        assert LoadReadings(demand_mw=100, capacity_mw=0).parameters() == {}

    def test_ash_pct(self) -> None:
        params = AshReadings(fly_ash_stored=45000, bottom_ash_stored=3000).parameters()
        assert params["fly_ash_pct"].value == 90.0
        assert params["bottom_ash_pct"].value == 20.0


class TestSeverityOrdering:
    def test_ordered(self) -> None:
        assert Severity.NORMAL < Severity.WARNING < Severity.CRITICAL


class TestRecipient:
    def test_opted_channels(self) -> None:
        r = Recipient(id="1", name="a", sms=True, whatsapp=False)
        assert r.opted_channels == (Channel.SMS,)
        assert r.opted_in(Channel.WHATSAPP) is False

    def test_violation_key(self) -> None:
        v = Violation(
            snapshot_id="s1", domain=Domain.ASH, parameter="fly_ash_pct",
            value=95, threshold=90, severity=Severity.WARNING,
        )
        assert v.key == ("s1", "fly_ash_pct")
