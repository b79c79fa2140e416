"""Maps third-party provider failures onto (retryable, reason) pairs."""

import httpx
import openai

from discharge_pipeline.processor.exceptions import (
    REASON_CONNECTION,
    REASON_MALFORMED_INPUT,
    REASON_RATE_LIMIT,
    REASON_SERVER_ERROR,
    REASON_TIMEOUT,
)


def classify_http_status(status_code: int) -> tuple[bool, str]:
    """429 and 5xx are transient; every other error status is terminal."""
    if status_code == 429:
        return True, REASON_RATE_LIMIT
    if status_code >= 500:
        return True, REASON_SERVER_ERROR
    return False, REASON_MALFORMED_INPUT


def classify_openai_error(exc: Exception) -> tuple[bool, str]:
    # APITimeoutError subclasses APIConnectionError, so it is checked first.
    if isinstance(exc, (openai.APITimeoutError, httpx.TimeoutException)):
        return True, REASON_TIMEOUT
    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
        return True, REASON_CONNECTION
    if isinstance(exc, openai.APIStatusError):
        return classify_http_status(exc.status_code)
    return False, REASON_MALFORMED_INPUT


def classify_httpx_error(exc: httpx.HTTPError) -> tuple[bool, str]:
    if isinstance(exc, httpx.TimeoutException):
        return True, REASON_TIMEOUT
    if isinstance(exc, httpx.HTTPStatusError):
        return classify_http_status(exc.response.status_code)
    if isinstance(exc, httpx.TransportError):
        return True, REASON_CONNECTION
    return False, REASON_MALFORMED_INPUT
