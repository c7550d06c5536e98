"""Exception hierarchy for alert delivery."""

from __future__ import annotations


class DeliveryError(Exception):
    """Base exception for delivery gateway errors."""


class GatewayNotConfiguredError(DeliveryError):
    """A live gateway was requested without credentials."""
