from discharge_pipeline.processor.exceptions import ProviderError


class GenerationError(ProviderError):
    """Raised when the text-generation provider fails or returns unusable output."""
