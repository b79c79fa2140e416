"""Machine translation of simplified discharge documents."""

import time

from discharge_pipeline.logging.logger import Log
from discharge_pipeline.processor.exceptions import REASON_EMPTY_RESPONSE
from discharge_pipeline.processor.retry import RetryPolicy
from discharge_pipeline.translation.client_base import BaseTranslationClient
from discharge_pipeline.translation.exceptions import TranslationError
from discharge_pipeline.translation.locale_headings import LocaleHeadingNormalizer
from discharge_pipeline.translation.models import TranslationResult


class Translator:
    """Translates simplified markdown and normalizes its localized headings."""

    def __init__(
        self,
        *,
        client: BaseTranslationClient,
        retry_policy: RetryPolicy,
        heading_normalizer: LocaleHeadingNormalizer,
        source_language: str = "en",
    ) -> None:
        self._client = client
        self._retry_policy = retry_policy
        self._heading_normalizer = heading_normalizer
        self._source_language = source_language

    @property
    def source_language(self) -> str:
        return self._source_language

    def translate(
        self, content: str, file_name: str, target_language: str
    ) -> TranslationResult:
        """Translate *content* into *target_language*.

        Raises:
            TranslationError: terminal for empty output and rejected input,
                retryable when transient failures outlasted every retry attempt.
        """
        started = time.monotonic()
        Log.info(
            "Starting translation",
            file_name=file_name,
            target_language=target_language,
            content_length=len(content),
        )

        translated = self._retry_policy.call(
            lambda: self._translate_once(content, target_language),
            operation="Translate API call",
        )
        translated = self._heading_normalizer.normalize(translated, target_language)

        processing_time_ms = int((time.monotonic() - started) * 1000)
        Log.info(
            "Translation completed",
            file_name=file_name,
            target_language=target_language,
            translated_length=len(translated),
            processing_time_ms=processing_time_ms,
        )
        return TranslationResult(
            translated_text=translated,
            source_language=self._source_language,
            target_language=target_language,
            word_count=len(translated.split()),
            processing_time_ms=processing_time_ms,
        )

    def _translate_once(self, content: str, target_language: str) -> str:
        text = self._client.translate_text(
            text=content,
            source_language=self._source_language,
            target_language=target_language,
        ).strip()
        if not text:
            raise TranslationError(
                "Empty translation response", reason=REASON_EMPTY_RESPONSE
            )
        return text
