"""Bounded retry for ledger store writes.

A commit is written with :func:`retry` so a transient :class:`StorageError`
(locked file, full disk that frees up) does not immediately roll the
ledger back.  Once the pauses from :func:`backoff_delays` run out the last
error is re-raised and the ledger undoes the commit.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable, Iterator
from typing import Any, TypeVar

from caroptions.core.constants import DEFAULT_RETRY_DELAY_SECONDS, DEFAULT_WRITE_RETRIES
from caroptions.core.exceptions import StorageError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def backoff_delays(
    retries: int,
    base_delay: float,
    backoff_factor: float = 2.0,
    max_delay: float = 5.0,
) -> Iterator[float]:
    """Yield the pause before each of *retries* re-attempts, capped at *max_delay*."""
    delay = base_delay
    for _ in range(max(0, retries)):
        yield min(delay, max_delay)
        delay *= backoff_factor


def retry(
    max_retries: int = DEFAULT_WRITE_RETRIES,
    base_delay: float = DEFAULT_RETRY_DELAY_SECONDS,
    max_delay: float = 5.0,
    backoff_factor: float = 2.0,
    exceptions: tuple[type[BaseException], ...] = (StorageError,),
) -> Callable[[F], F]:
    """Re-run the decorated call up to *max_retries* times when it raises *exceptions*.

    ``max_retries=0`` means a single attempt.  Other exception types pass
    straight through.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            pauses = backoff_delays(max_retries, base_delay, backoff_factor, max_delay)
            attempt = 1
            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions as exc:
                    pause = next(pauses, None)
                    if pause is None:
                        logger.error(
                            "%s gave up after %d attempt(s): %s", func.__qualname__, attempt, exc
                        )
                        raise
                    logger.warning(
                        "%s attempt %d of %d failed (%s); next try in %.2fs",
                        func.__qualname__,
                        attempt,
                        max_retries + 1,
                        exc,
                        pause,
                    )
                    time.sleep(pause)
                    attempt += 1

        return wrapper  # type: ignore[return-value]

    return decorator
