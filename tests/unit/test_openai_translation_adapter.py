from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from discharge_pipeline.translation.exceptions import TranslationError
from discharge_pipeline.translation.openai_client_adapter import (
    OpenAITranslationClientAdapter,
)


def _make_adapter(mock_client: MagicMock) -> OpenAITranslationClientAdapter:
    with patch(
        "discharge_pipeline.translation.openai_client_adapter.openai.OpenAI",
        return_value=mock_client,
    ):
        return OpenAITranslationClientAdapter(api_key="k", model="gpt-test", timeout_seconds=30)


def _translate(adapter: OpenAITranslationClientAdapter) -> str:
    return adapter.translate_text(text="## Overview", source_language="en", target_language="es")


class TestOpenAITranslationClientAdapter:
    def test_returns_translated_content(self) -> None:
        mock_client = MagicMock()
        choice = MagicMock()
        choice.message.content = "## Resumen"
        mock_client.chat.completions.create.return_value = MagicMock(choices=[choice])

        assert _translate(_make_adapter(mock_client)) == "## Resumen"

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert "from en to es" in kwargs["messages"][0]["content"]
        assert kwargs["messages"][1] == {"role": "user", "content": "## Overview"}

    def test_no_choices_is_terminal(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = MagicMock(choices=[])

        with pytest.raises(TranslationError) as exc_info:
            _translate(_make_adapter(mock_client))

        assert exc_info.value.retryable is False
        assert exc_info.value.reason == "empty_response"

    def test_server_error_is_retryable(self) -> None:
        request = httpx.Request("POST", "https://api.example.com/v1/chat/completions")
        response = httpx.Response(502, request=request)
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIStatusError(
            "bad gateway", response=response, body=None
        )

        with pytest.raises(TranslationError) as exc_info:
            _translate(_make_adapter(mock_client))

        assert exc_info.value.retryable is True
        assert exc_info.value.reason == "server_error"
