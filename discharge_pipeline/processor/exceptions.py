class PipelineError(Exception):
    """Base exception for all pipeline errors."""


class DocumentValidationError(PipelineError):
    """Raised when input does not look like a discharge document. Never retried."""


class TransportError(PipelineError):
    """Raised when the object store, metadata store or event bus fails.

    Always propagated so the delivery layer can redeliver the event.
    """


class ProviderError(PipelineError):
    """Raised when an external text provider (generation, translation) fails.

    Attributes:
        retryable: True for transient failures (timeout, connection reset,
            rate limit, 5xx); False for failures that cannot succeed on retry.
        reason: Short machine-readable failure reason.
        attempts: Number of provider calls made before giving up.
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        reason: str = "",
        attempts: int = 1,
    ) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.reason = reason
        self.attempts = attempts


# Failure reasons shared by generation and translation providers.
REASON_SAFETY_BLOCK = "safety_block"
REASON_EMPTY_RESPONSE = "empty_response"
REASON_UNEXPECTED_FINISH = "unexpected_finish_reason"
REASON_MALFORMED_INPUT = "malformed_input"
REASON_TIMEOUT = "timeout"
REASON_CONNECTION = "connection_error"
REASON_RATE_LIMIT = "rate_limit"
REASON_SERVER_ERROR = "server_error"
