"""Bounded retry with exponential backoff."""

from resilient_fetch.features.retry.backoff import BackoffSettings, ExponentialBackoff
from resilient_fetch.features.retry.driver import RetryDriver, ShouldRetry, retry


__all__ = [
    "BackoffSettings",
    "ExponentialBackoff",
    "RetryDriver",
    "ShouldRetry",
    "retry",
]
