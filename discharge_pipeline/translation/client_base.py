from abc import ABC, abstractmethod


class BaseTranslationClient(ABC):
    """Provider-neutral machine translation contract."""

    @abstractmethod
    def translate_text(
        self,
        *,
        text: str,
        source_language: str,
        target_language: str,
    ) -> str:
        """Translate plain text and return the provider's output.

        Raises:
            TranslationError: with ``retryable`` set for transient failures.
        """
