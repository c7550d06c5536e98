"""Delivery gateways — Twilio SMS/WhatsApp and the simulated fallback."""

from __future__ import annotations

import abc

import aiohttp
import structlog

from plantguard.alerts.exceptions import GatewayNotConfiguredError
from plantguard.alerts.types import GatewayResult
from plantguard.core.config import TwilioConfig
from plantguard.core.types import Channel

logger = structlog.get_logger(__name__)


class DeliveryGateway(abc.ABC):
    """Capability to send a text body to a destination over a channel."""

    @property
    @abc.abstractmethod
    def configured(self) -> bool:
        """True when sends reach a real network endpoint."""

    @abc.abstractmethod
    async def send_message(self, channel: Channel, destination: str, body: str) -> GatewayResult:
        """Send *body* to *destination*. Reports failures in the result."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release resources (HTTP sessions, etc.)."""


class SimulatedGateway(DeliveryGateway):
    """No-op gateway used when no credentials are configured.

    Logs the would-be message and makes no network call.
    """

    def __init__(self) -> None:
        self.sent: int = 0

    @property
    def configured(self) -> bool:
        return False

    async def send_message(self, channel: Channel, destination: str, body: str) -> GatewayResult:
        self.sent += 1
        logger.info(
            "delivery_simulated",
            channel=channel.value,
            destination=destination,
            body=body,
        )
        return GatewayResult(success=True, simulated=True)

    async def close(self) -> None:
        return None


class TwilioGateway(DeliveryGateway):
    """Delivers via the Twilio Messages REST API.

    WhatsApp uses the same endpoint with ``whatsapp:``-prefixed addresses.
    """

    def __init__(self, config: TwilioConfig) -> None:
        if not config.configured:
            raise GatewayNotConfiguredError("Twilio account SID, auth token and number required")
        self._account_sid = config.account_sid
        self._auth_token = config.auth_token.get_secret_value()
        self._from_number = config.from_number
        self._url = f"{config.base_url.rstrip('/')}/Accounts/{config.account_sid}/Messages.json"
        self._session: aiohttp.ClientSession | None = None

    @property
    def configured(self) -> bool:
        return True

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                auth=aiohttp.BasicAuth(self._account_sid, self._auth_token),
            )
        return self._session

    @staticmethod
    def _address(channel: Channel, number: str) -> str:
        if channel == Channel.WHATSAPP:
            return f"whatsapp:{number}"
        return number

    async def send_message(self, channel: Channel, destination: str, body: str) -> GatewayResult:
        payload = {
            "To": self._address(channel, destination),
            "From": self._address(channel, self._from_number),
            "Body": body,
        }

        try:
            session = self._get_session()
            async with session.post(self._url, data=payload) as resp:
                if resp.status in (200, 201):
                    data = await resp.json(content_type=None)
                    return GatewayResult(success=True, message_id=data.get("sid"))
                text = await resp.text()
                logger.warning(
                    "twilio_send_failed",
                    channel=channel.value,
                    status=resp.status,
                    body=text[:200],
                )
                return GatewayResult(success=False, error=f"HTTP {resp.status}: {text[:200]}")
        except Exception as exc:
            logger.exception("twilio_send_error", channel=channel.value)
            return GatewayResult(success=False, error=f"{type(exc).__name__}: {exc}")

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None


def create_gateway(config: TwilioConfig) -> DeliveryGateway:
    """Pick the live or simulated gateway once, from credential presence."""
    if config.configured:
        return TwilioGateway(config)
    logger.warning("gateway_not_configured", fallback="simulated")
    return SimulatedGateway()
