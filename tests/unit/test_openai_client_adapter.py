from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from newsdesk.inference.client_base import ChatMessage
from newsdesk.inference.exceptions import (
    InferenceError,
    InferenceNetworkError,
    InferenceRetryableError,
)
from newsdesk.inference.models import FilePayload
from newsdesk.inference.openai_client_adapter import OpenAIClientAdapter


def _make_mock_response(content: str | None) -> MagicMock:
    choice = MagicMock()
    choice.message.content = content
    response = MagicMock()
    response.choices = [choice]
    return response


def _status_response(code: int) -> httpx.Response:
    return httpx.Response(code, request=httpx.Request("POST", "https://api.example.com"))


def _make_adapter(mock_client: MagicMock) -> OpenAIClientAdapter:
    with patch(
        "newsdesk.inference.openai_client_adapter.openai.OpenAI",
        return_value=mock_client,
    ):
        return OpenAIClientAdapter(api_key="k", timeout_seconds=30, base_url=None)


def _complete(adapter: OpenAIClientAdapter, **overrides: object) -> str:
    kwargs: dict[str, object] = {
        "model": "m",
        "temperature": 0.1,
        "system_prompt": "system",
        "messages": [ChatMessage(role="user", parts=["user"])],
        "json_schema": {"type": "object"},
    }
    kwargs.update(overrides)
    return adapter.create_completion(**kwargs)  # type: ignore[arg-type]


class TestOpenAIClientAdapter:
    def test_returns_content(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response('{"ok": true}')

        content = _complete(_make_adapter(mock_client))

        assert content == '{"ok": true}'

    def test_disables_sdk_retries(self) -> None:
        with patch("newsdesk.inference.openai_client_adapter.openai.OpenAI") as mock_openai:
            OpenAIClientAdapter(api_key="k", timeout_seconds=30, base_url="https://x/v1")

        mock_openai.assert_called_once_with(
            api_key="k", timeout=30, base_url="https://x/v1", max_retries=0
        )

    def test_raises_error_for_empty_content(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response(None)

        with pytest.raises(InferenceError, match="empty response"):
            _complete(_make_adapter(mock_client))

    def test_raises_error_for_no_choices(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = MagicMock(choices=[])

        with pytest.raises(InferenceError, match="no choices"):
            _complete(_make_adapter(mock_client))

    def test_connection_failure_is_retryable(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=MagicMock()
        )

        with pytest.raises(InferenceRetryableError, match="transient error"):
            _complete(_make_adapter(mock_client))

    def test_rate_limit_is_retryable(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.RateLimitError(
            "slow down", response=_status_response(429), body=None
        )

        with pytest.raises(InferenceRetryableError):
            _complete(_make_adapter(mock_client))

    def test_server_error_is_retryable(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.InternalServerError(
            "overloaded", response=_status_response(503), body=None
        )

        with pytest.raises(InferenceRetryableError):
            _complete(_make_adapter(mock_client))

    def test_timeout_is_retryable(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = httpx.ReadTimeout("timeout")

        with pytest.raises(InferenceRetryableError):
            _complete(_make_adapter(mock_client))

    def test_bad_request_is_not_retryable(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.BadRequestError(
            "bad file", response=_status_response(400), body=None
        )

        with pytest.raises(InferenceNetworkError, match=r"rejected request \(400\)") as exc_info:
            _complete(_make_adapter(mock_client))

        assert not isinstance(exc_info.value, InferenceRetryableError)


class TestRequestShape:
    def _sent_request(self, **overrides: object) -> dict:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _make_mock_response("ok")
        _complete(_make_adapter(mock_client), **overrides)
        return mock_client.chat.completions.create.call_args.kwargs

    def test_json_schema_becomes_response_format(self) -> None:
        request = self._sent_request(schema_name="fact_check")

        assert request["response_format"]["json_schema"]["name"] == "fact_check"
        assert request["response_format"]["json_schema"]["schema"] == {"type": "object"}

    def test_plain_text_request_has_no_response_format(self) -> None:
        request = self._sent_request(json_schema=None)

        assert "response_format" not in request

    def test_system_prompt_is_first_message(self) -> None:
        request = self._sent_request()

        assert request["messages"][0] == {"role": "system", "content": "system"}

    def test_empty_system_prompt_is_omitted(self) -> None:
        request = self._sent_request(system_prompt="")

        assert request["messages"][0]["role"] == "user"

    def test_model_turns_become_assistant_messages(self) -> None:
        request = self._sent_request(
            system_prompt="",
            messages=[
                ChatMessage(role="user", parts=["hola"]),
                ChatMessage(role="model", parts=["qué tal"]),
            ],
        )

        assert request["messages"][1] == {"role": "assistant", "content": "qué tal"}

    def test_audio_payload_becomes_input_audio(self) -> None:
        audio = FilePayload("a.mp3", "QUJD", "audio/mpeg")
        request = self._sent_request(
            system_prompt="", messages=[ChatMessage(role="user", parts=[audio, "transcribe"])]
        )

        parts = request["messages"][0]["content"]
        assert parts[0] == {"type": "input_audio", "input_audio": {"data": "QUJD", "format": "mp3"}}
        assert parts[1] == {"type": "text", "text": "transcribe"}

    def test_document_payload_becomes_file_part(self) -> None:
        pdf = FilePayload("nota.pdf", "QUJD", "application/pdf")
        request = self._sent_request(
            system_prompt="", messages=[ChatMessage(role="user", parts=[pdf])]
        )

        part = request["messages"][0]["content"][0]
        assert part["type"] == "file"
        assert part["file"]["filename"] == "nota.pdf"
        assert part["file"]["file_data"] == "data:application/pdf;base64,QUJD"
