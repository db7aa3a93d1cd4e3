"""Exponential backoff and retry logic for storage API calls."""

import logging
import time
from typing import Any, Callable, Optional

from .errors import StorageError

logger = logging.getLogger(__name__)


class RetryHandler:
    """Implements exponential backoff and retry logic for storage API calls."""

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """Initialize retry handler.

        Args:
            max_retries: Maximum number of retry attempts
            base_delay: Base delay in seconds for exponential backoff
            max_delay: Maximum delay in seconds between retries
            sleep: Sleep function (injectable for tests)
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep or time.sleep

    def should_retry(self, error: Exception) -> bool:
        """Determine if an error should trigger a retry.

        Args:
            error: Exception that occurred

        Returns:
            True if the error is retryable, False otherwise
        """
        if isinstance(error, StorageError):
            return error.retryable

        # Network-related errors are generally retryable
        if isinstance(error, (ConnectionError, TimeoutError)):
            return True

        return False

    def calculate_delay(self, attempt: int) -> float:
        """Calculate delay for exponential backoff.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        delay = self.base_delay * (2**attempt)
        return min(delay, self.max_delay)

    def execute_with_retry(self, func: Callable, *args, **kwargs) -> Any:
        """Execute a function with retry logic.

        Args:
            func: Function to execute
            *args: Positional arguments for the function
            **kwargs: Keyword arguments for the function

        Returns:
            Result of the function call

        Raises:
            Exception: The last exception if all retries are exhausted
        """
        for attempt in range(self.max_retries + 1):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if attempt == self.max_retries or not self.should_retry(e):
                    raise

                delay = self.calculate_delay(attempt)
                logger.warning(
                    f"Retry attempt {attempt + 1}/{self.max_retries} after {delay:.1f}s: {e}"
                )
                self._sleep(delay)

        # max_retries < 0 never enters the loop
        return func(*args, **kwargs)
