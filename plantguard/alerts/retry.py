"""Pluggable retry policies for failed deliveries.

A policy only yields the delays to sleep between attempts; the channel
dispatcher owns the attempt loop. ``NoRetry`` is the default, so one
notification costs exactly one gateway call.

Usage::

    policy = BackoffRetry(retries=3, base_delay=1.0)
    for delay in policy.delays():
        ...
"""

from __future__ import annotations

import abc
import random
from collections.abc import Iterator

from plantguard.core.config import RetryConfig


class RetryPolicy(abc.ABC):
    """Strategy deciding how many retries follow a failed send, and when."""

    @abc.abstractmethod
    def delays(self) -> Iterator[float]:
        """Yield one sleep duration (seconds) per permitted retry."""


class NoRetry(RetryPolicy):
    def delays(self) -> Iterator[float]:
        return iter(())


class FixedRetry(RetryPolicy):
    """A fixed number of retries with a constant delay."""

    def __init__(self, retries: int = 2, delay_secs: float = 1.0) -> None:
        self.retries = retries
        self.delay_secs = delay_secs

    def delays(self) -> Iterator[float]:
        for _ in range(self.retries):
            yield self.delay_secs


class BackoffRetry(RetryPolicy):
    """Exponential backoff with jitter.

    Delay for retry *n* is ``min(base * multiplier**n, max_delay)`` widened by
    up to ``jitter`` (fraction) in either direction.
    """

    def __init__(
        self,
        retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        multiplier: float = 2.0,
        jitter: float = 0.1,
    ) -> None:
        self.retries = retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.multiplier = multiplier
        self.jitter = jitter

    def delays(self) -> Iterator[float]:
        for attempt in range(self.retries):
            delay = min(self.base_delay * (self.multiplier ** attempt), self.max_delay)
            spread = delay * random.uniform(-self.jitter, self.jitter)
            yield max(0.0, delay + spread)


def create_retry_policy(config: RetryConfig) -> RetryPolicy:
    if config.strategy == "fixed":
        return FixedRetry(retries=config.max_retries, delay_secs=config.delay_secs)
    if config.strategy == "backoff":
        return BackoffRetry(
            retries=config.max_retries,
            base_delay=config.delay_secs,
            max_delay=config.max_delay_secs,
            multiplier=config.multiplier,
            jitter=config.jitter,
        )
    return NoRetry()
