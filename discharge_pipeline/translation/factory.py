from discharge_pipeline.config.settings import Settings
from discharge_pipeline.processor.retry import RetryPolicy
from discharge_pipeline.translation.client_base import BaseTranslationClient
from discharge_pipeline.translation.example_client_adapter import (
    ExampleTranslationClientAdapter,
)
from discharge_pipeline.translation.google_client_adapter import (
    GoogleTranslateClientAdapter,
)
from discharge_pipeline.translation.locale_headings import LocaleHeadingNormalizer
from discharge_pipeline.translation.openai_client_adapter import (
    OpenAITranslationClientAdapter,
)
from discharge_pipeline.translation.translator import Translator


class TranslatorFactory:
    """Creates the configured translator."""

    SUPPORTED_PROVIDERS = ("example", "google", "openai")

    @classmethod
    def create(
        cls,
        settings: Settings,
        retry_policy: RetryPolicy | None = None,
        heading_normalizer: LocaleHeadingNormalizer | None = None,
    ) -> Translator:
        if retry_policy is None:
            retry_policy = RetryPolicy(
                max_attempts=settings.max_retries,
                base_delay_seconds=settings.retry_delay_seconds,
            )
        return Translator(
            client=cls._create_client(settings),
            retry_policy=retry_policy,
            heading_normalizer=heading_normalizer or LocaleHeadingNormalizer(),
            source_language=settings.source_language,
        )

    @classmethod
    def _create_client(cls, settings: Settings) -> BaseTranslationClient:
        provider = settings.translation_provider.lower()
        if provider == "example":
            return ExampleTranslationClientAdapter()
        if provider == "google":
            return GoogleTranslateClientAdapter(
                api_key=settings.translation_google_api_key,
                timeout_seconds=settings.translation_google_timeout_seconds,
            )
        if provider == "openai":
            return OpenAITranslationClientAdapter(
                api_key=settings.translation_openai_api_key,
                model=settings.translation_openai_model_name,
                timeout_seconds=settings.translation_openai_timeout_seconds,
            )
        raise ValueError(
            f"Unknown translation provider '{provider}'. "
            f"Choose from: {list(cls.SUPPORTED_PROVIDERS)}"
        )
