"""Tests for RecipientResolver — severity to channel routing."""

from __future__ import annotations

from plantguard.alerts.recipients import RecipientResolver
from plantguard.core.types import Channel, Recipient, Severity


def _recipient(**kw: object) -> Recipient:
    defaults: dict[str, object] = {
        "id": "u1",
        "name": "Shift Lead",
        "phone": "+15551112222",
        "sms": True,
        "whatsapp": True,
        "primary_channel": Channel.SMS,
    }
    defaults.update(kw)
    return Recipient(**defaults)  # type: ignore[arg-type]


class TestChannelsFor:
    def test_critical_uses_every_opted_channel(self) -> None:
        r = _recipient()
        assert RecipientResolver().channels_for(Severity.CRITICAL, r) == (
            Channel.SMS, Channel.WHATSAPP,
        )

    def test_warning_uses_primary(self) -> None:
        r = _recipient(primary_channel=Channel.WHATSAPP)
        assert RecipientResolver().channels_for(Severity.WARNING, r) == (Channel.WHATSAPP,)

    def test_warning_without_primary_uses_opted(self) -> None:
        r = _recipient(primary_channel=None)
        assert RecipientResolver().channels_for(Severity.WARNING, r) == (
            Channel.SMS, Channel.WHATSAPP,
        )

    def test_warning_primary_not_opted_in(self) -> None:
        r = _recipient(sms=False, primary_channel=Channel.SMS)
        assert RecipientResolver().channels_for(Severity.WARNING, r) == (Channel.WHATSAPP,)

    def test_normal_reaches_nobody(self) -> None:
        assert RecipientResolver().channels_for(Severity.NORMAL, _recipient()) == ()

    def test_critical_superset_of_warning(self) -> None:
        resolver = RecipientResolver()
        for r in (
            _recipient(),
            _recipient(sms=False),
            _recipient(whatsapp=False, primary_channel=None),
            _recipient(primary_channel=Channel.WHATSAPP),
        ):
            warning = set(resolver.channels_for(Severity.WARNING, r))
            critical = set(resolver.channels_for(Severity.CRITICAL, r))
            assert warning <= critical


class TestResolve:
    def test_sox_critical_reaches_both_recipients(self) -> None:
        recipients = [
            _recipient(id="sms-only", whatsapp=False),
            _recipient(id="wa-only", sms=False, primary_channel=Channel.WHATSAPP),
        ]
        routes = RecipientResolver().resolve(Severity.CRITICAL, recipients)
        pairs = [(r.recipient.id, ch) for r in routes for ch in r.channels]
        assert pairs == [("sms-only", Channel.SMS), ("wa-only", Channel.WHATSAPP)]

    def test_skips_inactive_and_phoneless(self) -> None:
        recipients = [
            _recipient(id="off", active=False),
            _recipient(id="nophone", phone=""),
            _recipient(id="ok"),
        ]
        routes = RecipientResolver().resolve(Severity.WARNING, recipients)
        assert [r.recipient.id for r in routes] == ["ok"]

    def test_skips_recipients_with_no_channels(self) -> None:
        routes = RecipientResolver().resolve(
            Severity.CRITICAL, [_recipient(sms=False, whatsapp=False)],
        )
        assert routes == []

    def test_empty_directory(self) -> None:
        assert RecipientResolver().resolve(Severity.CRITICAL, []) == []
