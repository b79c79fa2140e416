from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from discharge_pipeline.simplification.exceptions import GenerationError
from discharge_pipeline.simplification.openai_client_adapter import (
    OpenAIGenerationClientAdapter,
)


def _make_mock_response(
    content: str | None, finish_reason: str | None = "stop", total_tokens: int | None = 99
) -> MagicMock:
    choice = MagicMock()
    choice.message.content = content
    choice.finish_reason = finish_reason
    response = MagicMock()
    response.choices = [choice]
    response.usage = MagicMock(total_tokens=total_tokens) if total_tokens is not None else None
    return response


def _make_adapter(mock_client: MagicMock) -> OpenAIGenerationClientAdapter:
    with patch(
        "discharge_pipeline.simplification.openai_client_adapter.openai.OpenAI",
        return_value=mock_client,
    ):
        return OpenAIGenerationClientAdapter(api_key="k", timeout_seconds=30, base_url=None)


def _generate(adapter: OpenAIGenerationClientAdapter):
    return adapter.generate(
        model="m",
        temperature=0.1,
        max_output_tokens=100,
        system_prompt="system",
        user_prompt="user",
    )


def _status_error(status_code: int) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://api.example.com/v1/chat/completions")
    response = httpx.Response(status_code, request=request)
    return openai.APIStatusError("error", response=response, body=None)


class TestOpenAIGenerationClientAdapter:
    def test_returns_text_finish_reason_and_tokens(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response("## Overview")
        adapter = _make_adapter(mock_client)

        response = _generate(adapter)

        assert response.text == "## Overview"
        assert response.finish_reason == "stop"
        assert response.tokens_used == 99

    def test_normalizes_finish_reason_case(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response(
            "x", finish_reason="CONTENT_FILTER"
        )
        adapter = _make_adapter(mock_client)

        assert _generate(adapter).finish_reason == "content_filter"

    def test_missing_content_becomes_empty_text(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response(None)
        adapter = _make_adapter(mock_client)

        assert _generate(adapter).text == ""

    def test_missing_usage_gives_no_tokens(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response(
            "x", total_tokens=None
        )
        adapter = _make_adapter(mock_client)

        assert _generate(adapter).tokens_used is None

    def test_no_choices_raises_terminal_error(self) -> None:
        mock_client = MagicMock()
        response = MagicMock()
        response.choices = []
        mock_client.chat.completions.create.return_value = response
        adapter = _make_adapter(mock_client)

        with pytest.raises(GenerationError) as exc_info:
            _generate(adapter)
        assert exc_info.value.retryable is False

    def test_sends_max_tokens_and_messages(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response("x")
        adapter = _make_adapter(mock_client)

        _generate(adapter)

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["max_tokens"] == 100
        assert kwargs["messages"][0] == {"role": "system", "content": "system"}
        assert kwargs["messages"][1] == {"role": "user", "content": "user"}

    def test_disables_sdk_retries(self) -> None:
        with patch(
            "discharge_pipeline.simplification.openai_client_adapter.openai.OpenAI"
        ) as mock_openai:
            OpenAIGenerationClientAdapter(api_key="k", timeout_seconds=30)
        assert mock_openai.call_args.kwargs["max_retries"] == 0


class TestOpenAIGenerationErrorMapping:
    def test_timeout_is_retryable(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = httpx.ReadTimeout("timeout")
        adapter = _make_adapter(mock_client)

        with pytest.raises(GenerationError) as exc_info:
            _generate(adapter)
        assert exc_info.value.retryable is True
        assert exc_info.value.reason == "timeout"

    def test_connection_error_is_retryable(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = httpx.ConnectError("refused")
        adapter = _make_adapter(mock_client)

        with pytest.raises(GenerationError) as exc_info:
            _generate(adapter)
        assert exc_info.value.retryable is True
        assert exc_info.value.reason == "connection_error"

    @pytest.mark.parametrize(
        ("status_code", "retryable", "reason"),
        [
            (429, True, "rate_limit"),
            (500, True, "server_error"),
            (503, True, "server_error"),
            (400, False, "malformed_input"),
            (401, False, "malformed_input"),
        ],
    )
    def test_status_errors(self, status_code: int, retryable: bool, reason: str) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = _status_error(status_code)
        adapter = _make_adapter(mock_client)

        with pytest.raises(GenerationError) as exc_info:
            _generate(adapter)
        assert exc_info.value.retryable is retryable
        assert exc_info.value.reason == reason
