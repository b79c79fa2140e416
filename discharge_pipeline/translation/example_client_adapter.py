"""Example translation client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseTranslationClient and register the provider in TranslatorFactory.
"""

from discharge_pipeline.translation.client_base import BaseTranslationClient


class ExampleTranslationClientAdapter(BaseTranslationClient):
    """Example adapter that echoes the input text.

    No network calls. Useful for local development and tests.
    """

    def translate_text(
        self,
        *,
        text: str,
        source_language: str,
        target_language: str,
    ) -> str:
        _ = source_language, target_language
        return text
