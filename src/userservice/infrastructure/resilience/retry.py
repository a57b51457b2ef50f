"""
Retry logic with exponential backoff.

Provides a decorator-based retry mechanism for transient failures in
blocking storage calls (for example a locked SQLite database).
"""

import random
import time
from typing import Optional, Callable, Any, Type, Tuple
from dataclasses import dataclass
from functools import wraps

from ..logging import ServiceLogger, logging_context


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior.

    Attributes:
        max_retries: Maximum number of retry attempts
        initial_delay: Initial delay in seconds before first retry
        max_delay: Maximum delay in seconds between retries
        exponential_base: Base for exponential backoff (typically 2)
        jitter: Add random jitter to prevent thundering herd (0.0 to 1.0)
        retryable_exceptions: Tuple of exception types that should trigger retry
    """
    max_retries: int = 3
    initial_delay: float = 0.05
    max_delay: float = 1.0
    exponential_base: float = 2.0
    jitter: float = 0.1
    retryable_exceptions: Tuple[Type[Exception], ...] = (
        ConnectionError,
        TimeoutError,
        OSError,
    )


def compute_delay(config: RetryConfig, attempt: int) -> float:
    """
    Delay before the given attempt (1 = first retry).

    Exponential in the attempt number, capped at ``max_delay``, plus up
    to ``jitter`` of extra delay.
    """
    delay = min(
        config.initial_delay * (config.exponential_base ** (attempt - 1)),
        config.max_delay
    )
    if config.jitter > 0:
        delay = delay + delay * config.jitter * random.random()
    return delay


def retry_with_backoff(config: Optional[RetryConfig] = None):
    """
    Decorator for retrying blocking functions with exponential backoff.

    Args:
        config: Retry configuration (uses defaults if None)

    Returns:
        Decorated function with retry logic

    Example:
        >>> @retry_with_backoff(RetryConfig(retryable_exceptions=(sqlite3.OperationalError,)))
        ... def write_row(conn, row):
        ...     conn.execute("INSERT ...", row)
    """
    if config is None:
        config = RetryConfig()

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            logger = ServiceLogger.get_instance()
            last_exception = None

            for attempt in range(config.max_retries + 1):
                try:
                    if attempt > 0:
                        delay = compute_delay(config, attempt)

                        with logging_context(operation="retry_backoff"):
                            logger.warning(
                                f"Retrying {func.__name__} (attempt {attempt + 1}/{config.max_retries + 1})",
                                extra={
                                    "function": func.__name__,
                                    "attempt": attempt + 1,
                                    "max_attempts": config.max_retries + 1,
                                    "delay_seconds": round(delay, 3),
                                    "last_error": type(last_exception).__name__ if last_exception else None
                                }
                            )

                        time.sleep(delay)

                    result = func(*args, **kwargs)

                    if attempt > 0:
                        with logging_context(operation="retry_success"):
                            logger.info(
                                f"Retry successful for {func.__name__}",
                                extra={
                                    "function": func.__name__,
                                    "successful_attempt": attempt + 1,
                                }
                            )

                    return result

                except config.retryable_exceptions as e:
                    last_exception = e

                    if attempt == config.max_retries:
                        with logging_context(operation="retry_exhausted"):
                            logger.error(
                                f"All retry attempts exhausted for {func.__name__}",
                                exc_info=True,
                                extra={
                                    "function": func.__name__,
                                    "total_attempts": attempt + 1,
                                    "error_type": type(e).__name__,
                                }
                            )
                        raise

            raise last_exception if last_exception else RuntimeError("Unexpected retry state")

        return wrapper
    return decorator
