"""Resilience infrastructure for userservice."""

from .retry import retry_with_backoff, RetryConfig, compute_delay

__all__ = [
    "retry_with_backoff",
    "RetryConfig",
    "compute_delay",
]
