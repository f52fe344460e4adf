"""
Error recovery for network calls: retry policies with backoff.
"""

from .retry import (
    RetryPolicy, ExponentialBackoff, FixedBackoff, MaxRetriesExceeded,
    create_network_retry_policy, backoff
)

__all__ = [
    "RetryPolicy",
    "ExponentialBackoff",
    "FixedBackoff",
    "MaxRetriesExceeded",
    "create_network_retry_policy",
    "backoff",
]
