"""AI-powered discharge document simplifier."""

import time
from pathlib import Path

from discharge_pipeline.logging.logger import Log
from discharge_pipeline.normalization.sections import (
    APPOINTMENTS,
    CANONICAL_SECTIONS,
    DIET_ACTIVITY,
    MEDICATIONS,
    OVERVIEW,
    WARNING_SIGNS,
    CanonicalSection,
)
from discharge_pipeline.processor.exceptions import (
    REASON_EMPTY_RESPONSE,
    REASON_SAFETY_BLOCK,
    REASON_UNEXPECTED_FINISH,
)
from discharge_pipeline.processor.retry import RetryPolicy
from discharge_pipeline.simplification.client_base import BaseGenerationClient
from discharge_pipeline.simplification.exceptions import GenerationError
from discharge_pipeline.simplification.models import GenerationResponse, SimplificationResult
from discharge_pipeline.simplification.prompt_loader import (
    load_system_prompt,
    load_user_prompt_template,
)

MAX_TEMPERATURE = 0.3

NORMAL_FINISH_REASONS = frozenset({"stop", "length"})
SAFETY_FINISH_REASONS = frozenset({"content_filter", "safety"})

_SECTION_HINTS = {
    OVERVIEW.key: 'with "Reasons for Hospital Stay" and "What Happened During Your Stay"',
    MEDICATIONS.key: "with Frequency, When to Take and Special Instructions for each",
    DIET_ACTIVITY.key: (
        "with Foods to Include, Foods to Limit, Recommended Activities, Activities to Avoid"
    ),
    WARNING_SIGNS.key: (
        "with When to Call 911, When to Call Your Doctor, Emergency Contacts"
    ),
}

SUMMARY_INSTRUCTIONS = (
    "DOCUMENT TYPE: DISCHARGE SUMMARY\n"
    "This document describes the hospital stay. Output ONLY the Overview section."
)
INSTRUCTIONS_INSTRUCTIONS = (
    "DOCUMENT TYPE: DISCHARGE INSTRUCTIONS\n"
    "This document contains post-discharge instructions. Do NOT include the Overview."
)


def sections_for_file(file_name: str) -> tuple[CanonicalSection, ...]:
    """Pick the canonical sections relevant to a document, from its file name."""
    lowered = file_name.lower()
    if "summary" in lowered:
        return (OVERVIEW,)
    if "instructions" in lowered:
        return (MEDICATIONS, APPOINTMENTS, DIET_ACTIVITY, WARNING_SIGNS)
    return CANONICAL_SECTIONS


class Simplifier:
    """Simplifies a raw discharge document into patient-friendly markdown."""

    def __init__(
        self,
        *,
        client: BaseGenerationClient,
        model: str,
        retry_policy: RetryPolicy,
        temperature: float = 0.0,
        max_output_tokens: int = 8192,
        system_prompt_path: Path | None = None,
        user_prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._retry_policy = retry_policy
        self._temperature = max(0.0, min(MAX_TEMPERATURE, temperature))
        self._max_output_tokens = max_output_tokens
        self._system_prompt = load_system_prompt(system_prompt_path)
        self._user_prompt_template = load_user_prompt_template(user_prompt_path)

    def simplify(self, content: str, file_name: str) -> SimplificationResult:
        """Simplify *content*, retrying transient provider failures.

        Raises:
            GenerationError: ``retryable`` is False for safety blocks, empty
                responses, unexpected finish reasons and rejected input; True
                when transient failures outlasted every retry attempt.
        """
        started = time.monotonic()
        Log.info(
            "Starting simplification",
            file_name=file_name,
            content_length=len(content),
        )
        user_prompt = self.build_user_prompt(content, file_name)
        Log.debug(f"Simplification prompt:\n{user_prompt}")

        result = self._retry_policy.call(
            lambda: self._generate_once(user_prompt, file_name),
            operation="Generation call",
        )

        Log.info(
            "Simplification completed",
            file_name=file_name,
            simplified_length=len(result.simplified_text),
            tokens_used=result.tokens_used,
            processing_time_ms=int((time.monotonic() - started) * 1000),
        )
        return result

    def build_user_prompt(self, content: str, file_name: str) -> str:
        lowered = file_name.lower()
        if "summary" in lowered:
            document_type_instructions = SUMMARY_INSTRUCTIONS
        elif "instructions" in lowered:
            document_type_instructions = INSTRUCTIONS_INSTRUCTIONS
        else:
            document_type_instructions = ""

        lines = ["Output ONLY these sections, in this order:"]
        for section in sections_for_file(file_name):
            hint = _SECTION_HINTS.get(section.key)
            lines.append(f"  * ## {section.title}" + (f" ({hint})" if hint else ""))

        return self._user_prompt_template.format(
            file_name=file_name,
            document_type_instructions=document_type_instructions,
            sections_to_output="\n".join(lines),
            content=content,
        )

    def _generate_once(self, user_prompt: str, file_name: str) -> SimplificationResult:
        response = self._client.generate(
            model=self._model,
            temperature=self._temperature,
            max_output_tokens=self._max_output_tokens,
            system_prompt=self._system_prompt,
            user_prompt=user_prompt,
        )
        return self._classify(response, file_name)

    @staticmethod
    def _classify(response: GenerationResponse, file_name: str) -> SimplificationResult:
        reason = response.finish_reason
        if reason in SAFETY_FINISH_REASONS:
            Log.warning("Content blocked by safety filters", file_name=file_name)
            raise GenerationError(
                "Content was blocked by safety filters", reason=REASON_SAFETY_BLOCK
            )
        if reason not in NORMAL_FINISH_REASONS:
            raise GenerationError(
                f"Unexpected finish reason: {reason or 'none'}",
                reason=REASON_UNEXPECTED_FINISH,
            )
        text = response.text.strip()
        if not text:
            raise GenerationError("Empty response from AI provider", reason=REASON_EMPTY_RESPONSE)
        return SimplificationResult(simplified_text=text, tokens_used=response.tokens_used)
