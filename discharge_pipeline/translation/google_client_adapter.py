from typing import Any

import httpx

from discharge_pipeline.processor.exceptions import REASON_EMPTY_RESPONSE
from discharge_pipeline.processor.provider_errors import classify_httpx_error
from discharge_pipeline.translation.client_base import BaseTranslationClient
from discharge_pipeline.translation.exceptions import TranslationError

GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"


class GoogleTranslateClientAdapter(BaseTranslationClient):
    """Translation client adapter for the Google Cloud Translation v2 REST API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        url: str = GOOGLE_TRANSLATE_URL,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._url = url
        self._http = http_client or httpx.Client(timeout=timeout_seconds)

    def translate_text(
        self,
        *,
        text: str,
        source_language: str,
        target_language: str,
    ) -> str:
        try:
            response = self._http.post(
                self._url,
                params={"key": self._api_key},
                json={
                    "q": text,
                    "source": source_language,
                    "target": target_language,
                    "format": "text",
                },
            )
            response.raise_for_status()
            payload: dict[str, Any] = response.json()
        except httpx.HTTPError as exc:
            retryable, reason = classify_httpx_error(exc)
            raise TranslationError(
                f"Google Translate API error: {exc}", retryable=retryable, reason=reason
            ) from exc
        except ValueError as exc:
            raise TranslationError(
                f"Google Translate returned invalid JSON: {exc}",
                reason=REASON_EMPTY_RESPONSE,
            ) from exc

        translations = (payload.get("data") or {}).get("translations") or []
        if not translations:
            raise TranslationError(
                "Google Translate returned no translations", reason=REASON_EMPTY_RESPONSE
            )
        return str(translations[0].get("translatedText") or "")
