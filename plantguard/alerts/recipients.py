"""RecipientResolver — who gets an alert, and on which channels."""

from __future__ import annotations

from plantguard.alerts.types import Route
from plantguard.core.types import Channel, Recipient, Severity


class RecipientResolver:
    """Maps a severity onto routes over the active, opted-in recipients.

    - WARNING reaches each recipient on their primary channel when it is set
      and opted into, otherwise on every opted-in channel.
    - CRITICAL reaches each recipient on every opted-in channel.
    - NORMAL reaches nobody.

    Recipients that are inactive, have no phone number, or end up with no
    channel are left out. An empty result is a normal outcome.
    """

    def channels_for(self, severity: Severity, recipient: Recipient) -> tuple[Channel, ...]:
        opted = recipient.opted_channels
        if severity == Severity.CRITICAL:
            return opted
        if severity == Severity.WARNING:
            primary = recipient.primary_channel
            if primary is not None and primary in opted:
                return (primary,)
            return opted
        return ()

    def resolve(self, severity: Severity, recipients: list[Recipient]) -> list[Route]:
        routes: list[Route] = []
        for recipient in recipients:
            if not recipient.active or not recipient.phone:
                continue
            channels = self.channels_for(severity, recipient)
            if channels:
                routes.append(Route(recipient=recipient, channels=channels))
        return routes
