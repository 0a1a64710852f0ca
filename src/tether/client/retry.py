"""Retry with exponential backoff for reads racing replication."""

import logging
import random
import time
from collections.abc import Callable

from tether.config.models import ReadRetryConfig

logger = logging.getLogger(__name__)


def calculate_delay(attempt: int, config: ReadRetryConfig, jitter: float = 0.1) -> float:
    """Calculate delay before the next attempt.

    Args:
        attempt: Attempt that just failed (1-indexed).
        config: Retry configuration.
        jitter: Fraction of the delay to randomize by.

    Returns:
        Delay in seconds.
    """
    delay = min(config.base_delay * (2 ** (attempt - 1)), config.max_delay)

    jitter_range = delay * jitter
    delay += random.uniform(-jitter_range, jitter_range)  # noqa: S311

    return max(0.0, delay)


def with_retry[T](
    func: Callable[[], T],
    config: ReadRetryConfig,
    retry_on: tuple[type[Exception], ...],
    operation_name: str = "request",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``func`` until it succeeds or raises something not in ``retry_on``.

    Raises:
        The last exception once ``config.max_attempts`` calls have failed.
    """
    for attempt in range(1, config.max_attempts + 1):
        try:
            return func()
        except retry_on as e:
            if attempt >= config.max_attempts:
                logger.warning(
                    "%s failed after %d attempts: %s",
                    operation_name,
                    config.max_attempts,
                    e,
                )
                raise

            delay = calculate_delay(attempt, config)
            logger.debug(
                "%s attempt %d/%d failed: %s. Retrying in %.2fs",
                operation_name,
                attempt,
                config.max_attempts,
                e,
                delay,
            )
            sleep(delay)

    raise RuntimeError("Unexpected retry loop exit")
