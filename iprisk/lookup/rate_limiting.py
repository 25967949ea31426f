"""Rate limiting utilities for geolocation providers."""

from __future__ import annotations

import random
import time
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import requests

T = TypeVar("T")

DEFAULT_MAX_BACKOFF_SECONDS = 30.0


def _get_retry_after_seconds(response: Optional[requests.Response]) -> Optional[float]:
    """Return the Retry-After delay in seconds, or None if absent or not numeric."""
    if response is None:
        return None
    retry_after = response.headers.get("Retry-After")
    if not retry_after:
        return None
    try:
        return max(0.0, float(retry_after))
    except ValueError:
        return None


class RateLimiter:
    """Token bucket rate limiter for API calls."""

    def __init__(self, rate: float, burst: int):
        """Initialize rate limiter.

        Args:
            rate: Tokens per second
            burst: Maximum burst capacity
        """
        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        self.rate = rate
        self.burst = max(1, burst)
        self.tokens: float = float(self.burst)
        self.last_update = time.monotonic()

    def acquire_sync(self) -> None:
        """Take one token, sleeping until one is available."""
        now = time.monotonic()
        elapsed = now - self.last_update
        self.tokens = min(self.burst, self.tokens + elapsed * self.rate)
        self.last_update = now

        if self.tokens < 1:
            wait_time = (1 - self.tokens) / self.rate
            time.sleep(wait_time)
            self.tokens = 0
            self.last_update = time.monotonic()
        else:
            self.tokens -= 1


class RateLimitedSession:
    """Requests session with rate limiting."""

    def __init__(self, rate_limit: float = 0.75, burst: int = 5, user_agent: str | None = None):
        """Initialize rate-limited session.

        Args:
            rate_limit: Requests per second
            burst: Maximum burst capacity
            user_agent: Optional User-Agent header for every request
        """
        self.session = requests.Session()
        if user_agent:
            self.session.headers["User-Agent"] = user_agent
        self.rate_limiter = RateLimiter(rate_limit, burst)

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        """Rate-limited GET request."""
        self.rate_limiter.acquire_sync()
        return self.session.get(url, **kwargs)

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()


def with_retries(
    max_retries: int = 2,
    backoff_base: float = 0.5,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    max_backoff_seconds: float = DEFAULT_MAX_BACKOFF_SECONDS,
) -> Callable:
    """Decorator for retry logic with exponential backoff.

    Retries on connection errors, timeouts and HTTP 429/5xx responses raised via
    ``raise_for_status``. A numeric Retry-After header replaces the computed backoff;
    either delay is capped at ``max_backoff_seconds``.

    Args:
        max_retries: Maximum number of retry attempts
        backoff_base: Base backoff time in seconds
        backoff_factor: Multiplier for exponential backoff
        jitter: Whether to add random jitter to backoff times
        max_backoff_seconds: Upper bound for any single sleep between attempts
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            last_exception: Optional[Exception] = None

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except requests.HTTPError as e:
                    status = e.response.status_code if e.response is not None else None
                    if status is not None and status != 429 and status < 500:
                        raise
                    last_exception = e
                    if attempt == max_retries:
                        break
                    backoff = _get_retry_after_seconds(e.response)
                    if backoff is None:
                        backoff = _backoff(attempt, backoff_base, backoff_factor, jitter)
                    time.sleep(min(backoff, max_backoff_seconds))
                except (requests.ConnectionError, requests.Timeout, ConnectionError, TimeoutError) as e:
                    last_exception = e
                    if attempt == max_retries:
                        break
                    time.sleep(min(_backoff(attempt, backoff_base, backoff_factor, jitter), max_backoff_seconds))

            if last_exception is not None:
                raise last_exception
            raise RuntimeError("Retry loop completed without exception")

        return wrapper

    return decorator


def _backoff(attempt: int, base: float, factor: float, jitter: bool) -> float:
    backoff = base * (factor**attempt)
    if jitter:
        backoff *= 0.5 + random.random() * 0.5
    return backoff


__all__ = ["RateLimitedSession", "RateLimiter", "with_retries"]
