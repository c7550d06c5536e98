"""ChannelDispatcher — one message, one destination, one channel."""

from __future__ import annotations

import asyncio

import structlog

from plantguard.alerts.gateways import DeliveryGateway
from plantguard.alerts.retry import NoRetry, RetryPolicy
from plantguard.alerts.types import DeliveryOutcome, DeliveryStatus
from plantguard.core.types import Channel

logger = structlog.get_logger(__name__)


class ChannelDispatcher:
    """Wraps a delivery gateway so that a send never raises.

    - Unconfigured gateway → ``SIMULATED`` (message logged, no network call),
      or ``FAILED`` if even the simulated send raises.
    - Gateway error, bad status or timeout → ``FAILED`` with a reason.
    - Each gateway call is bounded by ``timeout_secs``.
    - Failed sends are retried only as the retry policy allows.
    """

    def __init__(
        self,
        gateway: DeliveryGateway,
        timeout_secs: float = 5.0,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._gateway = gateway
        self._timeout_secs = timeout_secs
        self._retry = retry_policy or NoRetry()

    @property
    def gateway(self) -> DeliveryGateway:
        return self._gateway

    @property
    def simulated(self) -> bool:
        return not self._gateway.configured

    async def send(self, destination: str, channel: Channel, message: str) -> DeliveryOutcome:
        if not destination:
            return DeliveryOutcome.failed("missing destination", attempts=0)

        if self.simulated:
            outcome = await self._attempt(destination, channel, message)
            if outcome.status == DeliveryStatus.FAILED:
                return outcome
            return DeliveryOutcome(status=DeliveryStatus.SIMULATED)

        delays = self._retry.delays()
        attempts = 0
        while True:
            attempts += 1
            outcome = await self._attempt(destination, channel, message)
            if outcome.status != DeliveryStatus.FAILED:
                break
            delay = next(delays, None)
            if delay is None:
                break
            logger.info(
                "delivery_retry",
                channel=channel.value,
                destination=destination,
                attempt=attempts,
                delay_secs=round(delay, 3),
                reason=outcome.reason,
            )
            await asyncio.sleep(delay)

        return outcome.model_copy(update={"attempts": attempts})

    async def _attempt(self, destination: str, channel: Channel, message: str) -> DeliveryOutcome:
        try:
            result = await asyncio.wait_for(
                self._gateway.send_message(channel, destination, message),
                timeout=self._timeout_secs,
            )
        except TimeoutError:
            logger.warning(
                "delivery_timeout",
                channel=channel.value,
                destination=destination,
                timeout_secs=self._timeout_secs,
            )
            return DeliveryOutcome.failed(f"timeout after {self._timeout_secs}s")
        except Exception as exc:
            logger.exception("delivery_error", channel=channel.value, destination=destination)
            return DeliveryOutcome.failed(f"{type(exc).__name__}: {exc}")

        if result.simulated:
            return DeliveryOutcome(status=DeliveryStatus.SIMULATED)
        if result.success:
            return DeliveryOutcome(status=DeliveryStatus.SUCCESS, message_id=result.message_id)
        return DeliveryOutcome.failed(result.error or "gateway reported failure")
