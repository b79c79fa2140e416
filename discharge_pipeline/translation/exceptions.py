from discharge_pipeline.processor.exceptions import ProviderError


class TranslationError(ProviderError):
    """Raised when the translation provider fails or returns unusable output."""
