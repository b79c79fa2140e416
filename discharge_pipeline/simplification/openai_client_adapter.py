import httpx
import openai

from discharge_pipeline.processor.exceptions import REASON_EMPTY_RESPONSE
from discharge_pipeline.processor.provider_errors import classify_openai_error
from discharge_pipeline.simplification.client_base import BaseGenerationClient
from discharge_pipeline.simplification.exceptions import GenerationError
from discharge_pipeline.simplification.models import GenerationResponse


class OpenAIGenerationClientAdapter(BaseGenerationClient):
    """Generation client adapter built on OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def generate(
        self,
        *,
        model: str,
        temperature: float,
        max_output_tokens: int,
        system_prompt: str,
        user_prompt: str,
    ) -> GenerationResponse:
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_output_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except (openai.APIError, httpx.HTTPError) as exc:
            retryable, reason = classify_openai_error(exc)
            raise GenerationError(
                f"AI provider error: {exc}", retryable=retryable, reason=reason
            ) from exc

        if not response.choices:
            raise GenerationError("AI returned no choices", reason=REASON_EMPTY_RESPONSE)
        choice = response.choices[0]
        tokens_used = response.usage.total_tokens if response.usage else None
        return GenerationResponse(
            text=choice.message.content or "",
            finish_reason=(choice.finish_reason or "").lower(),
            tokens_used=tokens_used,
        )
