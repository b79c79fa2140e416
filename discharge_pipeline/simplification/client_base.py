from abc import ABC, abstractmethod

from discharge_pipeline.simplification.models import GenerationResponse


class BaseGenerationClient(ABC):
    """Contract for provider-specific text-generation clients."""

    @abstractmethod
    def generate(
        self,
        *,
        model: str,
        temperature: float,
        max_output_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> GenerationResponse:
        """Return the provider response with its normalized finish reason.

        Finish reasons are lower-case: ``stop``, ``length``, ``content_filter``
        or whatever other value the provider reported.

        Raises:
            GenerationError: on transport or HTTP failures, with ``retryable``
                set for timeouts, connection errors, 429 and 5xx.
        """
