"""Retry with exponential backoff for transient network failures.

Installer downloads (the Homebrew and chezmoi install scripts) can fail
because of flaky connectivity on freshly provisioned machines. Only
connection-level errors are retried; an HTTP error status is final.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Tuple, Type, TypeVar

import requests

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_attempts: Maximum number of attempts (including the first one)
        base_delay: Delay in seconds before the first retry
        max_delay: Upper bound for any single delay
        exponential_base: Multiplier applied per attempt
        retryable_exceptions: Exception types that trigger a retry
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    retryable_exceptions: Tuple[Type[Exception], ...] = (
        requests.ConnectionError,
        requests.Timeout,
    )

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be non-negative")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")

    def delay_for(self, attempt: int) -> float:
        """Delay before retrying after the given 0-indexed attempt."""
        return min(self.base_delay * (self.exponential_base**attempt), self.max_delay)


DOWNLOAD_RETRY_CONFIG = RetryConfig(max_attempts=3, base_delay=1.0, max_delay=10.0)


class RetryManager:
    """Runs a callable, retrying on the configured exception types."""

    def __init__(self, config: RetryConfig | None = None, sleep: Callable[[float], None] = time.sleep):
        self.config = config or RetryConfig()
        self._sleep = sleep

    def execute(self, func: Callable[..., T], *args, **kwargs) -> T:
        """Call func until it succeeds or attempts run out.

        Raises:
            The last retryable exception once all attempts have failed.
            Non-retryable exceptions propagate immediately.
        """
        for attempt in range(self.config.max_attempts):
            try:
                return func(*args, **kwargs)
            except self.config.retryable_exceptions as e:
                if attempt == self.config.max_attempts - 1:
                    logger.error(f"All {self.config.max_attempts} attempts failed. Final error: {e}")
                    raise
                delay = self.config.delay_for(attempt)
                logger.warning(
                    f"Attempt {attempt + 1}/{self.config.max_attempts} failed: {e}. "
                    f"Retrying in {delay:.2f}s..."
                )
                self._sleep(delay)
