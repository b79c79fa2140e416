from dataclasses import dataclass


@dataclass(frozen=True)
class GenerationResponse:
    """Provider-neutral view of one generation call."""

    text: str
    finish_reason: str
    tokens_used: int | None = None


@dataclass(frozen=True)
class SimplificationResult:
    """Output of the simplification step."""

    simplified_text: str
    tokens_used: int | None = None
