import httpx
import openai

from discharge_pipeline.processor.exceptions import REASON_EMPTY_RESPONSE
from discharge_pipeline.processor.provider_errors import classify_openai_error
from discharge_pipeline.translation.client_base import BaseTranslationClient
from discharge_pipeline.translation.exceptions import TranslationError

SYSTEM_PROMPT = (
    "You are a professional medical translator. Translate the user's document "
    "from {source} to {target}. Keep the markdown structure (headings, lists, "
    "tables, bold text) exactly as it is and translate only the text. "
    "Return only the translated document."
)


class OpenAITranslationClientAdapter(BaseTranslationClient):
    """Translation client adapter built on OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._model = model
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    def translate_text(
        self,
        *,
        text: str,
        source_language: str,
        target_language: str,
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=0.0,
                messages=[
                    {
                        "role": "system",
                        "content": SYSTEM_PROMPT.format(
                            source=source_language, target=target_language
                        ),
                    },
                    {"role": "user", "content": text},
                ],
            )
        except (openai.APIError, httpx.HTTPError) as exc:
            retryable, reason = classify_openai_error(exc)
            raise TranslationError(
                f"AI translation error: {exc}", retryable=retryable, reason=reason
            ) from exc

        if not response.choices:
            raise TranslationError("AI returned no choices", reason=REASON_EMPTY_RESPONSE)
        return response.choices[0].message.content or ""
