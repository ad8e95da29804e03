"""Exponential backoff and retry utilities."""

import logging
import random
import time
from typing import Callable, TypeVar

from meetspace_wizard.core.exceptions import RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def exponential_backoff(
    attempt: int,
    base_delay: float = 0.5,
    max_delay: float = 8.0,
    jitter: float = 0.1,
) -> float:
    """Calculate delay for exponential backoff with jitter.

    Args:
        attempt: Current attempt number (0-indexed)
        base_delay: Base delay in seconds
        max_delay: Maximum delay cap
        jitter: Jitter factor (0.0 to 1.0)

    Returns:
        Delay in seconds for this attempt
    """
    delay = min(base_delay * (2**attempt), max_delay)

    if jitter > 0:
        spread = delay * jitter
        delay += random.uniform(-spread, spread)

    return max(0.0, delay)


def retry_with_backoff(
    func: Callable[[], T],
    max_retries: int = 3,
    base_delay: float = 0.5,
    max_delay: float = 8.0,
    jitter: float = 0.1,
    retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[int, Exception, float], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Execute a function, retrying transient failures with exponential backoff.

    Exceptions outside `retryable_exceptions` propagate immediately.

    Args:
        func: Function to execute
        max_retries: Retries after the first attempt
        base_delay: Base delay between retries
        max_delay: Maximum delay cap
        jitter: Jitter factor for randomization
        retryable_exceptions: Exception types that trigger a retry
        on_retry: Called before each retry with (attempt, exception, delay)
        sleep: Sleep function (injected by tests)

    Returns:
        Result from the first successful call

    Raises:
        RetryExhaustedError: If every attempt failed with a retryable error
    """
    attempt = 0
    while True:
        try:
            return func()
        except retryable_exceptions as e:
            if attempt >= max_retries:
                logger.warning(f"Giving up after {attempt + 1} attempts: {e}")
                raise RetryExhaustedError(
                    message=f"All {max_retries} retry attempts exhausted",
                    attempts=attempt + 1,
                    last_error=e,
                    details={"last_error_type": type(e).__name__, "last_error_msg": str(e)},
                ) from e

            delay = exponential_backoff(attempt, base_delay, max_delay, jitter)
            logger.info(f"Attempt {attempt + 1} failed: {e}. Retrying in {delay:.2f}s...")
            if on_retry:
                on_retry(attempt, e, delay)
            sleep(delay)
            attempt += 1
