from dataclasses import dataclass


@dataclass(frozen=True)
class TranslationResult:
    """Translated document plus simple quality metrics."""

    translated_text: str
    source_language: str
    target_language: str
    word_count: int
    processing_time_ms: int
