"""Cheap keyword heuristic that rejects obviously wrong uploads before an LLM call."""

from discharge_pipeline.logging.logger import Log

MEDICAL_KEYWORDS: tuple[str, ...] = (
    "patient",
    "discharge",
    "diagnosis",
    "medication",
    "treatment",
    "hospital",
    "doctor",
    "admission",
    "follow-up",
    "prescription",
)

MIN_KEYWORD_MATCHES = 3


def count_medical_keywords(text: str) -> int:
    """Count how many distinct medical keywords occur in *text*."""
    lowered = text.lower()
    return sum(1 for keyword in MEDICAL_KEYWORDS if keyword in lowered)


def is_likely_medical_document(text: str) -> bool:
    """Return True iff at least three distinct medical keywords are present."""
    keyword_count = count_medical_keywords(text)
    is_valid = keyword_count >= MIN_KEYWORD_MATCHES
    Log.debug(
        "Medical content validation",
        keyword_count=keyword_count,
        is_valid=is_valid,
        content_length=len(text),
    )
    return is_valid
