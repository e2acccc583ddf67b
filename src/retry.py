"""Retry-with-backoff combinator shared by camera acquisition and analysis."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from src.constants import (
    BACKOFF_MULTIPLIER,
    INITIAL_DELAY_SECONDS,
    MAX_ATTEMPTS,
    MSG_ATTEMPT_FAILED,
    MSG_CANCELLED,
    MSG_RETRYING,
)
from src.errors import OperationCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = MAX_ATTEMPTS
    initial_delay: float = INITIAL_DELAY_SECONDS
    multiplier: float = BACKOFF_MULTIPLIER

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def delay(self, attempt: int) -> float:
        """Seconds to wait after the failed 0-based ``attempt``."""
        return self.initial_delay * self.multiplier ** attempt


class CancelToken:
    """Lets an owner abandon a retry loop, including one parked in a backoff wait."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError(MSG_CANCELLED)

    async def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds`` or until cancelled, whichever comes first."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
        self.raise_if_cancelled()


class RetryExhaustedError(Exception):

    def __init__(self, attempts: int, last_error: Exception) -> None:
        super().__init__(str(last_error))
        self.attempts = attempts
        self.last_error = last_error


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    label: str,
    token: CancelToken | None = None,
    sleep: Sleep | None = None,
) -> T:
    """Await ``operation`` until it succeeds or ``policy`` runs out of attempts.

    Raises RetryExhaustedError wrapping the final failure, or
    OperationCancelledError when ``token`` is cancelled between attempts.
    """
    match (sleep, token):
        case (None, None):
            pause: Sleep = asyncio.sleep
        case (None, t):
            pause = t.sleep
        case (s, _):
            pause = s

    attempt = 0
    while True:
        if token is not None:
            token.raise_if_cancelled()
        try:
            return await operation()
        except Exception as exc:
            logger.warning(MSG_ATTEMPT_FAILED, label, attempt + 1, policy.max_attempts, exc)
            if attempt + 1 >= policy.max_attempts:
                raise RetryExhaustedError(attempt + 1, exc) from exc
            delay = policy.delay(attempt)
            logger.debug(MSG_RETRYING, label, delay)
            await pause(delay)
            attempt += 1
