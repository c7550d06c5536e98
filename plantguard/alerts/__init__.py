"""Recipient resolution and multi-channel alert delivery."""

from plantguard.alerts.coordinator import DispatchCoordinator
from plantguard.alerts.dispatcher import ChannelDispatcher
from plantguard.alerts.exceptions import DeliveryError, GatewayNotConfiguredError
from plantguard.alerts.gateways import (
    DeliveryGateway,
    SimulatedGateway,
    TwilioGateway,
    create_gateway,
)
from plantguard.alerts.recipients import RecipientResolver
from plantguard.alerts.retry import (
    BackoffRetry,
    FixedRetry,
    NoRetry,
    RetryPolicy,
    create_retry_policy,
)
from plantguard.alerts.types import (
    DeliveryOutcome,
    DeliveryStatus,
    DispatchAttempt,
    DispatchSummary,
    GatewayResult,
    Route,
)

__all__ = [
    "BackoffRetry",
    "ChannelDispatcher",
    "DeliveryError",
    "DeliveryGateway",
    "DeliveryOutcome",
    "DeliveryStatus",
    "DispatchAttempt",
    "DispatchCoordinator",
    "DispatchSummary",
    "FixedRetry",
    "GatewayNotConfiguredError",
    "GatewayResult",
    "NoRetry",
    "RecipientResolver",
    "RetryPolicy",
    "Route",
    "SimulatedGateway",
    "TwilioGateway",
    "create_gateway",
    "create_retry_policy",
]
