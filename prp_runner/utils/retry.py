"""Bounded retries for flaky async calls.

The pipeline retries two things: agent runs that hit their timeout and
pull request creation against the GitHub API. Both go through
``async_retry``; the sleep function is a parameter so tests never wait.

Example:
    >>> @async_retry(max_attempts=3, exceptions=(ExternalServiceError,))
    ... async def open_pr() -> PullRequest:
    ...     return await github.create_pull_request(...)

The wait before attempt ``n + 1`` is ``backoff_factor ** n`` seconds,
capped at ``max_delay``.
"""

import asyncio
import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")

AsyncFn = Callable[..., Awaitable[T]]


def async_retry(
    max_attempts: int = 3,
    backoff_factor: float = 2.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    max_delay: float = 60.0,
) -> Callable[[AsyncFn[T]], AsyncFn[T]]:
    """Retry the decorated coroutine when it raises one of ``exceptions``.

    Args:
        max_attempts: Total calls made, including the first one
        backoff_factor: Base of the exponential wait between calls
        exceptions: Retryable exception types; anything else propagates at once
        sleep: Coroutine used to wait between calls
        max_delay: Upper bound for a single wait, in seconds

    Raises:
        The exception from the final attempt once attempts run out.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def decorator(func: AsyncFn[T]) -> AsyncFn[T]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 1
            while True:
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_attempts:
                        log.error("retry_exhausted", function=func.__name__, attempts=attempt, error=str(e))
                        raise
                    delay = min(backoff_factor**attempt, max_delay)
                    log.warning(
                        "retry_scheduled",
                        function=func.__name__,
                        attempt=attempt,
                        max_attempts=max_attempts,
                        delay=delay,
                        error=str(e),
                    )
                    await sleep(delay)
                    attempt += 1

        return wrapper

    return decorator
