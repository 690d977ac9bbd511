"""Shared HTTP utilities for the model client.

Provides retry-with-backoff so transient 429/5xx answers and dropped
connections do not surface as tool failures.
"""

from __future__ import annotations

import logging
import time

import httpx

from texmcp.cancellation import check_cancelled

logger = logging.getLogger("texmcp")

DEFAULT_TIMEOUT = 60.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_BASE = 1.0  # seconds


def _is_retryable(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


def post_with_retry(
    url: str,
    *,
    max_retries: int = DEFAULT_MAX_RETRIES,
    backoff_base: float = DEFAULT_BACKOFF_BASE,
    **kwargs,
) -> httpx.Response:
    """httpx.post with exponential backoff on 429/5xx and connection errors.

    Args:
        url: Request URL.
        max_retries: Maximum retry attempts (default 3).
        backoff_base: Base delay in seconds (default 1.0). Doubles each retry.
        **kwargs: Passed to httpx.post (json, headers, timeout, etc.).

    Returns:
        The final httpx.Response (may still be an error after all retries).

    Raises:
        httpx.ConnectError, httpx.TimeoutException: On connection failure
            after all retries exhausted.
        Cancelled: If the calling tool invocation was cancelled.
    """
    kwargs.setdefault("timeout", DEFAULT_TIMEOUT)

    for attempt in range(max_retries + 1):
        check_cancelled(f"POST {url} attempt {attempt + 1}")
        try:
            resp = httpx.post(url, **kwargs)
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            if attempt < max_retries:
                wait = backoff_base * (2**attempt)
                logger.info("POST %s failed (%s), retrying in %.1fs", url, type(e).__name__, wait)
                time.sleep(wait)
                continue
            raise

        if _is_retryable(resp.status_code) and attempt < max_retries:
            wait = backoff_base * (2**attempt)
            # Respect Retry-After header
            retry_after = resp.headers.get("retry-after", "")
            if retry_after.isdigit():
                wait = max(wait, float(retry_after))
            logger.info("POST %s → HTTP %d, retrying in %.1fs", url, resp.status_code, wait)
            time.sleep(wait)
            continue

        return resp

    return resp  # type: ignore[possibly-undefined]
