"""
Polling and backoff policies.
"""

from .retry import RetryPolicy, ExponentialBackoff, FixedBackoff, finality_policy

__all__ = ["RetryPolicy", "ExponentialBackoff", "FixedBackoff", "finality_policy"]
