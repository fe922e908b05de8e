"""
Polling policies.

Backoff schedules used when waiting for a submitted transaction's effect to
become observable. Policies only compute delays; the caller owns the loop
and the sleep function.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import Iterator, Tuple


logger = logging.getLogger(__name__)


class RetryPolicy(ABC):
    """
    Number of polls and the wait before each one.

    Args:
        max_attempts: Polls allowed, at least one
        base_delay: Wait before the first poll in seconds
        max_delay: Upper bound of any single wait in seconds
        jitter: Randomise waits by up to ``jitter_factor / 2`` either way
        jitter_factor: Relative spread of the jitter
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        jitter: bool = True,
        jitter_factor: float = 0.1
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.jitter_factor = jitter_factor

    @abstractmethod
    def calculate_delay(self, attempt: int) -> float:
        """Wait in seconds before poll number ``attempt`` (1-based), without jitter."""

    def add_jitter(self, delay: float) -> float:
        if not self.jitter:
            return delay
        spread = delay * self.jitter_factor * (random.random() - 0.5)
        return max(0, delay + spread)

    def delays(self) -> Iterator[Tuple[int, float]]:
        """Yield ``(attempt, delay)`` for every attempt the policy allows."""
        for attempt in range(1, self.max_attempts + 1):
            yield attempt, self.add_jitter(self.calculate_delay(attempt))

    def total_delay(self) -> float:
        """Upper bound of the time spent waiting, without jitter."""
        return sum(self.calculate_delay(a) for a in range(1, self.max_attempts + 1))


class ExponentialBackoff(RetryPolicy):
    """Waits ``base_delay * factor ** (attempt - 1)``, capped at ``max_delay``."""

    def __init__(
        self,
        max_attempts: int = 5,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        factor: float = 2.0,
        jitter: bool = True,
        jitter_factor: float = 0.1
    ):
        super().__init__(max_attempts, base_delay, max_delay, jitter, jitter_factor)
        self.factor = factor

    def calculate_delay(self, attempt: int) -> float:
        return min(self.base_delay * (self.factor ** (attempt - 1)), self.max_delay)


class FixedBackoff(RetryPolicy):
    """Same wait before every poll."""

    def __init__(
        self,
        max_attempts: int = 3,
        delay: float = 1.0,
        jitter: bool = False,
        jitter_factor: float = 0.1
    ):
        super().__init__(max_attempts, delay, delay, jitter, jitter_factor)

    def calculate_delay(self, attempt: int) -> float:
        return self.base_delay


def finality_policy(block_time: float, max_attempts: int = 8) -> RetryPolicy:
    """
    Default policy for waiting on inclusion.

    Starts at one block time and doubles up to eight blocks.
    """
    return ExponentialBackoff(
        max_attempts=max_attempts,
        base_delay=block_time,
        max_delay=block_time * 8,
        factor=2.0,
        jitter=False,
    )
