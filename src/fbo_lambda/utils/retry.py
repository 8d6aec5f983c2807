"""
Retry utilities with bounded exponential backoff.
"""

import time
from typing import Callable, TypeVar

T = TypeVar('T')


def delay(ms: float) -> None:
    """Block the invocation for ``ms`` milliseconds."""
    time.sleep(ms / 1000)


def compute_backoff_delay(attempt: int, base_delay_ms: float = 1000, max_delay_ms: float = 10000) -> float:
    """Delay before the retry that follows failed attempt ``attempt`` (0-based)."""
    return min(base_delay_ms * (2 ** attempt), max_delay_ms)


def retry_with_backoff(
    operation: Callable[[], T],
    max_retries: int = 3,
    base_delay_ms: float = 1000,
    max_delay_ms: float = 10000,
) -> T:
    """
    Call ``operation`` until it succeeds, at most ``max_retries + 1`` times.

    Args:
        operation: Zero-argument callable to execute
        max_retries: Number of retries after the first attempt
        base_delay_ms: Delay after the first failure, doubled on each retry
        max_delay_ms: Upper bound for a single delay

    Returns:
        The first successful result of ``operation``

    Raises:
        ValueError: If ``max_retries`` is negative; no attempt is made
        Exception: The error raised by the last attempt
    """
    if max_retries < 0:
        raise ValueError(f'max_retries must be >= 0, got {max_retries}: no attempts were made')

    attempt = 0
    while True:
        try:
            return operation()
        except Exception:
            if attempt >= max_retries:
                raise
        delay(compute_backoff_delay(attempt, base_delay_ms, max_delay_ms))
        attempt += 1
