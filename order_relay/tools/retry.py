"""Exponential backoff for Shopify Admin API calls.

Retries on throttling (429), Shopify 5xx responses and transport errors.
Honours the Retry-After header Shopify sends with 429 responses.
Only API reads and webhook registration go through here; FTP delivery is
never retried.
"""

from __future__ import annotations

import functools
import logging
import random
import time
from typing import Any, Callable

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    jitter: float = 0.2,
) -> Callable:
    """Decorator: retry an httpx call with exponential backoff + jitter.

    Args:
        max_retries: Retry attempts after the first call.
        base_delay: Delay before the first retry, in seconds.
        max_delay: Upper bound for any single delay.
        jitter: Fraction of the delay added or removed at random.
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 0
            while True:
                try:
                    return fn(*args, **kwargs)
                except httpx.HTTPStatusError as e:
                    status = e.response.status_code
                    if status not in RETRYABLE_STATUS_CODES or attempt >= max_retries:
                        raise
                    delay = backoff_delay(attempt, base_delay, max_delay, jitter, e.response)
                    reason = f"HTTP {status}"
                except httpx.TransportError as e:
                    if attempt >= max_retries:
                        raise
                    delay = backoff_delay(attempt, base_delay, max_delay, jitter)
                    reason = type(e).__name__

                attempt += 1
                logger.warning(
                    "Retry %d/%d for %s (%s), waiting %.1fs",
                    attempt,
                    max_retries,
                    fn.__name__,
                    reason,
                    delay,
                )
                time.sleep(delay)

        return wrapper

    return decorator


def backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    jitter: float,
    response: httpx.Response | None = None,
) -> float:
    """Delay before retry number ``attempt + 1``, Retry-After first."""
    if response is not None:
        retry_after = response.headers.get("Retry-After")
        if retry_after:
            try:
                return min(float(retry_after), max_delay)
            except ValueError:
                pass

    delay = min(base_delay * (2**attempt), max_delay)
    spread = delay * jitter
    return max(0.0, delay + random.uniform(-spread, spread))
