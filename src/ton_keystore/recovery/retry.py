"""
Retry policies for network calls.

Balance lookups, deployment checks, sequence number fetches and transfer
submission are retried with bounded exponential backoff. Retrying is safe:
reads have no side effects and a transfer is bound to its sequence number.
"""

import asyncio
import inspect
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from ..runtime.errors import NetworkError, NetworkUnavailableError


logger = logging.getLogger(__name__)


class RetryError(Exception):
    """Retry operation failed."""
    pass


class MaxRetriesExceeded(RetryError):
    """Maximum retry attempts exceeded."""
    def __init__(self, attempts: int, last_error: Exception):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Max retries ({attempts}) exceeded. Last error: {last_error}")


@dataclass
class RetryAttempt:
    """Information about a retry attempt."""
    attempt: int
    delay: float
    exception: Optional[Exception] = None


class RetryPolicy(ABC):
    """
    Abstract base class for retry policies.

    Defines the interface for retry strategies with configurable
    backoff algorithms and retry conditions.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        jitter: bool = True,
        jitter_factor: float = 0.1
    ):
        """
        Initialize retry policy.

        Args:
            max_attempts: Maximum number of attempts, first one included
            base_delay: Base delay between retries in seconds
            max_delay: Maximum delay between retries in seconds
            jitter: Whether to add jitter to delays
            jitter_factor: Jitter factor (0.0 to 1.0)
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.jitter_factor = jitter_factor

        self.total_attempts = 0
        self.total_retries = 0
        self.last_attempts: List[RetryAttempt] = []

    @abstractmethod
    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay for given attempt number.

        Args:
            attempt: Attempt number (1-based)

        Returns:
            Delay in seconds
        """
        pass

    def should_retry(self, attempt: int, exception: Exception) -> bool:
        """
        Determine if operation should be retried.

        Only ``NetworkError`` is retried; any other exception is a failure of
        its own and propagates on the first attempt.
        """
        if attempt >= self.max_attempts:
            return False
        return isinstance(exception, NetworkError)

    def add_jitter(self, delay: float) -> float:
        """
        Add jitter to delay if enabled.

        Args:
            delay: Base delay

        Returns:
            Delay with jitter applied
        """
        if not self.jitter:
            return delay

        jitter_amount = delay * self.jitter_factor * (random.random() - 0.5)
        return max(0, delay + jitter_amount)

    async def execute(
        self,
        func: Callable,
        *args,
        **kwargs
    ) -> Any:
        """
        Execute function with retry policy.

        Args:
            func: Function or coroutine function to execute
            *args: Function arguments
            **kwargs: Function keyword arguments

        Returns:
            Function result

        Raises:
            MaxRetriesExceeded: If max retries exceeded
        """
        attempt = 0
        last_exception = None
        attempts = []
        self.last_attempts = attempts

        while attempt < self.max_attempts:
            attempt += 1
            self.total_attempts += 1

            retry_attempt = RetryAttempt(attempt=attempt, delay=0.0)
            attempts.append(retry_attempt)

            try:
                if inspect.iscoroutinefunction(func):
                    result = await func(*args, **kwargs)
                else:
                    result = func(*args, **kwargs)

                if attempt > 1:
                    logger.info(f"Operation succeeded on attempt {attempt}")

                return result

            except Exception as e:
                retry_attempt.exception = e
                last_exception = e

                if not isinstance(e, NetworkError):
                    raise
                if not self.should_retry(attempt, e):
                    break

                delay = self.calculate_delay(attempt)
                delay = min(delay, self.max_delay)
                delay = self.add_jitter(delay)

                retry_attempt.delay = delay
                self.total_retries += 1

                logger.warning(
                    f"Attempt {attempt} failed: {e}. "
                    f"Retrying in {delay:.2f}s..."
                )

                await asyncio.sleep(delay)

        raise MaxRetriesExceeded(attempt, last_exception)


class ExponentialBackoff(RetryPolicy):
    """
    Exponential backoff retry policy.

    Delay increases exponentially with each attempt: base_delay * (factor ^ (attempt - 1))
    """

    def __init__(
        self,
        max_attempts: int = 5,
        base_delay: float = 0.5,
        max_delay: float = 8.0,
        factor: float = 2.0,
        jitter: bool = True,
        jitter_factor: float = 0.1
    ):
        """
        Initialize exponential backoff policy.

        Args:
            max_attempts: Maximum attempts
            base_delay: Base delay in seconds
            max_delay: Maximum delay cap
            factor: Exponential factor
            jitter: Enable jitter
            jitter_factor: Jitter randomization factor
        """
        super().__init__(max_attempts, base_delay, max_delay, jitter, jitter_factor)
        self.factor = factor

    def calculate_delay(self, attempt: int) -> float:
        """Calculate exponential backoff delay."""
        delay = self.base_delay * (self.factor ** (attempt - 1))
        return min(delay, self.max_delay)


class FixedBackoff(RetryPolicy):
    """
    Fixed delay retry policy.

    Uses constant delay between all retry attempts.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        delay: float = 1.0,
        jitter: bool = True,
        jitter_factor: float = 0.1
    ):
        super().__init__(max_attempts, delay, delay, jitter, jitter_factor)

    def calculate_delay(self, attempt: int) -> float:
        """Calculate fixed delay."""
        return self.base_delay


def create_network_retry_policy(
    max_attempts: int = 5,
    base_delay: float = 0.5,
    max_delay: float = 8.0
) -> RetryPolicy:
    """Create the retry policy used for every network call."""
    return ExponentialBackoff(
        max_attempts=max_attempts,
        base_delay=base_delay,
        max_delay=max_delay,
        factor=2.0,
        jitter=True
    )


async def backoff(func: Callable, *args, policy: Optional[RetryPolicy] = None, **kwargs) -> Any:
    """
    Run a network call under a retry policy.

    Raises:
        NetworkUnavailableError: If every attempt failed
    """
    policy = policy or create_network_retry_policy()
    try:
        return await policy.execute(func, *args, **kwargs)
    except MaxRetriesExceeded as e:
        logger.error(f"Giving up after {e.attempts} attempts: {e.last_error}")
        raise NetworkUnavailableError(
            f"Network call failed after {e.attempts} attempts",
            details={"attempts": e.attempts},
            cause=e.last_error,
        )


__all__ = [
    "RetryPolicy",
    "ExponentialBackoff",
    "FixedBackoff",
    "MaxRetriesExceeded",
    "RetryAttempt",
    "create_network_retry_policy",
    "backoff",
]
