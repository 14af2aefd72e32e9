"""Clients for the third-party APIs behind the generator.

Provides a shared ``with_retries`` decorator for idempotent network calls and
``build_http_client`` so every source talks HTTP with the same timeout and
User-Agent.
"""

from __future__ import annotations

import functools
import logging
import time

import httpx

logger = logging.getLogger(__name__)

# Connection-level failures only; HTTP error statuses are mapped to
# ``UpstreamError`` inside the decorated call and are never retried.
RETRYABLE_HTTP_ERRORS: tuple[type[BaseException], ...] = (httpx.TransportError,)


def with_retries(
    attempts: int = 3,
    first_delay: float = 0.5,
    retry_on: tuple[type[BaseException], ...] = RETRYABLE_HTTP_ERRORS,
):
    """Run an idempotent upstream call up to *attempts* times.

    The wait starts at *first_delay* seconds and doubles after each failure.
    The last attempt's exception propagates unchanged.
    """

    def decorator(func):  # type: ignore[no-untyped-def]
        @functools.wraps(func)
        def wrapper(*args, **kwargs):  # type: ignore[no-untyped-def]
            for delay in (first_delay * 2**i for i in range(max(attempts, 1) - 1)):
                try:
                    return func(*args, **kwargs)
                except retry_on as exc:
                    logger.warning("%s failed (%s); retrying in %.1fs", func.__qualname__, exc, delay)
                    time.sleep(delay)
            return func(*args, **kwargs)

        return wrapper

    return decorator


def build_http_client(base_url: str = "", **kwargs) -> httpx.Client:  # type: ignore[no-untyped-def]
    """Return an ``httpx.Client`` configured from the ``http`` settings section.

    Extra keyword arguments (e.g. ``transport`` in tests) are passed through.
    """
    from addrgen.settings import get_settings

    settings = get_settings()
    headers = {"User-Agent": settings.http.user_agent, "Accept": "application/json"}
    headers.update(kwargs.pop("headers", {}) or {})
    return httpx.Client(
        base_url=base_url,
        timeout=settings.http.timeout_sec,
        headers=headers,
        **kwargs,
    )
