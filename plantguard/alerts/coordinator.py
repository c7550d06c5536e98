"""DispatchCoordinator — bounded concurrent fan-out of one alert."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import structlog

from plantguard.alerts.dispatcher import ChannelDispatcher
from plantguard.alerts.types import DeliveryOutcome, DispatchAttempt, DispatchSummary, Route
from plantguard.core.types import Channel, Recipient, Violation
from plantguard.evaluation.formatters import format_broadcast

logger = structlog.get_logger(__name__)


class DispatchCoordinator:
    """Issues one dispatcher call per (recipient, channel) pair and tallies outcomes.

    Sends run concurrently, bounded by a semaphore shared across every
    dispatch made through this coordinator. One pair failing never cancels
    another. There are no retries at this level; see ``RetryPolicy``.
    """

    def __init__(self, dispatcher: ChannelDispatcher, max_concurrency: int = 10) -> None:
        self._dispatcher = dispatcher
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))

    @property
    def dispatcher(self) -> ChannelDispatcher:
        return self._dispatcher

    async def dispatch(
        self,
        violation: Violation,
        routes: list[Route],
        message: str | None = None,
    ) -> DispatchSummary:
        """Deliver *violation* (or *message*, if given) along every route."""
        body = message if message is not None else violation.message
        pairs = [(route.recipient, ch) for route in routes for ch in route.channels]
        attempts = await self._fan_out(violation.parameter, pairs, body)
        summary = DispatchSummary(violation=violation, attempts=attempts)

        logger.info(
            "violation_dispatched",
            domain=violation.domain,
            parameter=violation.parameter,
            severity=violation.severity.name,
            **summary.counts(),
        )
        return summary

    async def broadcast(
        self,
        message: str,
        recipients: list[Recipient],
        channels: Iterable[Channel] = (Channel.SMS, Channel.WHATSAPP),
        urgent: bool = False,
        departments: Iterable[str] = (),
    ) -> DispatchSummary:
        """Send an operator message to every active recipient opted into *channels*."""
        wanted = tuple(channels)
        dept_filter = set(departments)
        body = format_broadcast(message, urgent=urgent)

        pairs: list[tuple[Recipient, Channel]] = []
        for recipient in recipients:
            if not recipient.active or not recipient.phone:
                continue
            if dept_filter and recipient.department not in dept_filter:
                continue
            pairs.extend((recipient, ch) for ch in wanted if recipient.opted_in(ch))

        attempts = await self._fan_out("broadcast", pairs, body)
        summary = DispatchSummary(attempts=attempts)
        logger.info("broadcast_dispatched", urgent=urgent, **summary.counts())
        return summary

    # ── Internal ────────────────────────────────────────────────

    async def _fan_out(
        self,
        parameter: str,
        pairs: list[tuple[Recipient, Channel]],
        body: str,
    ) -> list[DispatchAttempt]:
        if not pairs:
            return []
        tasks = [self._send_one(parameter, recipient, ch, body) for recipient, ch in pairs]
        return list(await asyncio.gather(*tasks))

    async def _send_one(
        self,
        parameter: str,
        recipient: Recipient,
        channel: Channel,
        body: str,
    ) -> DispatchAttempt:
        async with self._semaphore:
            try:
                outcome = await self._dispatcher.send(recipient.phone, channel, body)
            except Exception as exc:
                logger.exception(
                    "dispatch_pair_error",
                    recipient_id=recipient.id,
                    channel=channel.value,
                )
                outcome = DeliveryOutcome.failed(f"{type(exc).__name__}: {exc}")
        return DispatchAttempt(
            parameter=parameter,
            recipient_id=recipient.id,
            channel=channel,
            outcome=outcome,
        )
