from typing import Any

import httpx
import openai

from newsdesk.inference.client_base import BaseInferenceClient, ChatMessage, MessagePart
from newsdesk.inference.exceptions import (
    InferenceError,
    InferenceNetworkError,
    InferenceRetryableError,
)
from newsdesk.inference.models import FilePayload

_AUDIO_FORMATS = {"audio/wav": "wav", "audio/mpeg": "mp3", "audio/mp3": "mp3"}


class OpenAIClientAdapter(BaseInferenceClient):
    """Inference client built on the OpenAI-compatible chat API."""

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

    def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        messages: list[ChatMessage],
        json_schema: dict[str, object] | None = None,
        schema_name: str = "result",
    ) -> str:
        request: dict[str, Any] = {
            "model": model,
            "temperature": temperature,
            "messages": self._build_messages(system_prompt, messages),
        }
        if json_schema is not None:
            request["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": schema_name, "strict": False, "schema": json_schema},
            }

        try:
            response = self._client.chat.completions.create(**request)
        except (
            openai.APIConnectionError,
            openai.RateLimitError,
            openai.InternalServerError,
            httpx.ConnectError,
            httpx.TimeoutException,
        ) as exc:
            raise InferenceRetryableError(f"AI provider transient error: {exc}") from exc
        except openai.APIStatusError as exc:
            raise InferenceNetworkError(
                f"AI provider rejected request ({exc.status_code}): {exc}"
            ) from exc
        except openai.APIError as exc:
            raise InferenceNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise InferenceError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise InferenceError("AI returned empty response")
        return content

    def _build_messages(
        self, system_prompt: str, messages: list[ChatMessage]
    ) -> list[dict[str, Any]]:
        built: list[dict[str, Any]] = []
        if system_prompt:
            built.append({"role": "system", "content": system_prompt})
        for message in messages:
            role = "assistant" if message.role == "model" else "user"
            if role == "assistant":
                text = "\n".join(p for p in message.parts if isinstance(p, str))
                built.append({"role": role, "content": text})
            else:
                built.append(
                    {"role": role, "content": [self._content_part(p) for p in message.parts]}
                )
        return built

    @staticmethod
    def _content_part(part: MessagePart) -> dict[str, Any]:
        if isinstance(part, str):
            return {"type": "text", "text": part}
        audio_format = _AUDIO_FORMATS.get(part.mime_type)
        if audio_format is not None:
            return {
                "type": "input_audio",
                "input_audio": {"data": part.data_base64, "format": audio_format},
            }
        return _file_part(part)


def _file_part(payload: FilePayload) -> dict[str, Any]:
    return {
        "type": "file",
        "file": {
            "filename": payload.file_name,
            "file_data": f"data:{payload.mime_type};base64,{payload.data_base64}",
        },
    }
