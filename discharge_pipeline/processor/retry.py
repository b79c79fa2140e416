"""Bounded in-process retry for provider calls.

The delay grows linearly: ``base_delay * attempt_number``. Only errors that
carry ``retryable=True`` are retried; anything else propagates on the first
failure. When the attempts run out, an error of the same class is raised with
``retryable=True`` so the delivery layer can redeliver the whole event later.
"""

import time
from collections.abc import Callable
from typing import TypeVar

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from discharge_pipeline.logging.logger import Log
from discharge_pipeline.processor.exceptions import ProviderError

T = TypeVar("T")


def is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, ProviderError) and exc.retryable


class RetryPolicy:
    """Retry a callable on retryable ProviderErrors with linear backoff."""

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay_seconds: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay_seconds = base_delay_seconds
        self._sleep = sleep

    def call(self, fn: Callable[[], T], *, operation: str) -> T:
        """Invoke *fn* until it succeeds, fails terminally, or attempts run out.

        Raises:
            ProviderError: the terminal error unchanged, or a retryable error
                of the same class wrapping the last cause after exhaustion.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(
                start=self.base_delay_seconds,
                increment=self.base_delay_seconds,
            ),
            retry=retry_if_exception(is_retryable),
            sleep=self._sleep,
            before_sleep=self._log_retry(operation),
        )
        try:
            return retrying(fn)
        except RetryError as exc:
            last = exc.last_attempt.exception()
            if not isinstance(last, ProviderError):
                raise
            raise type(last)(
                f"{operation} failed after {self.max_attempts} attempts: {last}",
                retryable=True,
                reason=last.reason,
                attempts=self.max_attempts,
            ) from last

    @staticmethod
    def _log_retry(operation: str) -> Callable[[RetryCallState], None]:
        def _before_sleep(state: RetryCallState) -> None:
            delay = state.next_action.sleep if state.next_action else 0.0
            error = state.outcome.exception() if state.outcome else None
            Log.warning(
                f"Retrying {operation} after {delay:.2f}s",
                attempt_number=state.attempt_number,
                error=str(error),
            )

        return _before_sleep
