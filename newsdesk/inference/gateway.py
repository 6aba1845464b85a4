"""Inference gateway: prompts, retries and reply parsing."""

import json
from collections.abc import Callable
from dataclasses import replace
from typing import Any, TypeVar

from newsdesk.documents.exceptions import TextExtractionError
from newsdesk.documents.factory import TextExtractorFactory
from newsdesk.inference.base import BaseInferenceGateway
from newsdesk.inference.client_base import BaseInferenceClient, ChatMessage, MessagePart
from newsdesk.inference.exceptions import InferenceError
from newsdesk.inference.media import is_pdf, is_word_document, normalize_mime_type
from newsdesk.inference.models import (
    AnalysisResult,
    ChatTurn,
    FactCheck,
    FilePayload,
    PressReleaseResult,
)
from newsdesk.inference.prompt_loader import load_json_schema, load_prompt
from newsdesk.inference.retry import retry_operation
from newsdesk.inference.validator import (
    build_analysis_result,
    build_fact_check,
    build_press_release_result,
)
from newsdesk.logging.logger import Log

T = TypeVar("T")

WORD_EMPTY_PLACEHOLDER = "Word document (sent as binary, text extraction returned nothing)"
WORD_FAILED_PLACEHOLDER = "Word document (sent as binary, text extraction failed)"
BINARY_PLACEHOLDER = "Document (PDF/other, sent as binary)"


class InferenceGateway(BaseInferenceGateway):
    """Talks to an LLM provider through a BaseInferenceClient."""

    def __init__(
        self,
        *,
        client: BaseInferenceClient,
        model: str,
        fast_model: str | None = None,
        text_extractors: TextExtractorFactory | None = None,
        max_retries: int = 3,
        retry_delay_seconds: float = 2.0,
    ) -> None:
        self._client = client
        self._model = model
        self._fast_model = fast_model or model
        self._text_extractors = text_extractors or TextExtractorFactory()
        self._max_retries = max_retries
        self._retry_delay_seconds = retry_delay_seconds

    def transcribe(self, payload: FilePayload) -> AnalysisResult:
        payload = replace(payload, mime_type=normalize_mime_type(payload.mime_type))
        schema = json.loads(load_json_schema("transcription"))
        messages = [ChatMessage(role="user", parts=[payload, load_prompt("transcription")])]

        def operation() -> AnalysisResult:
            raw = self._client.create_completion(
                model=self._model,
                temperature=0.1,
                system_prompt="",
                messages=messages,
                json_schema=schema,
                schema_name="transcription_result",
            )
            return build_analysis_result(self._parse_json(raw))

        result = self._retry(operation)
        Log.info(
            f"Transcribed {payload.file_name}: {len(result.transcription)} segments, "
            f"{len(result.fact_checks)} fact checks"
        )
        return result

    def rewrite_press_release(
        self, payload: FilePayload, user_angle: str | None = None
    ) -> PressReleaseResult:
        parts, source_text = self._press_release_parts(payload)
        angle_section = f"\nRequired editorial angle: {user_angle}\n" if user_angle else ""
        parts.append(load_prompt("press_release").format(angle_section=angle_section))
        schema = json.loads(load_json_schema("press_release"))
        messages = [ChatMessage(role="user", parts=parts)]

        def operation() -> PressReleaseResult:
            raw = self._client.create_completion(
                model=self._model,
                temperature=0.1,
                system_prompt="",
                messages=messages,
                json_schema=schema,
                schema_name="press_release_result",
            )
            return build_press_release_result(
                self._parse_json(raw),
                fallback_source_text=source_text,
                user_angle=user_angle,
            )

        result = self._retry(operation)
        Log.info(f"Rewrote press release {payload.file_name}: {result.headline!r}")
        return result

    def verify_claim(self, text: str) -> FactCheck:
        Log.info(f"Requesting manual verification for: {text[:50]!r}")
        prompt = load_prompt("verification").format(text=text)
        schema = json.loads(load_json_schema("fact_check"))
        messages = [ChatMessage(role="user", parts=[prompt])]

        def operation() -> FactCheck:
            raw = self._client.create_completion(
                model=self._model,
                temperature=0.1,
                system_prompt="",
                messages=messages,
                json_schema=schema,
                schema_name="fact_check",
            )
            Log.debug(f"Raw verification response:\n{raw}")
            return build_fact_check(self._parse_json(raw))

        return self._retry(operation)

    def chat(
        self,
        history: list[ChatTurn],
        message: str,
        *,
        transcript: str | None = None,
        sources: list[FilePayload] | None = None,
    ) -> str:
        past = [ChatMessage(role=turn.role, parts=[turn.text]) for turn in history]
        if transcript is not None:
            system_prompt = load_prompt("source_chat")
            temperature = 0.7
            context = f"CONTEXT (full interview transcript):\n{transcript}"
            messages = [
                ChatMessage(role="user", parts=[context]),
                *past,
                ChatMessage(role="user", parts=[message]),
            ]
        elif sources:
            system_prompt = load_prompt("documents")
            temperature = 0.5
            parts: list[MessagePart] = ["Attached documents for this query:"]
            for source in sources:
                parts.append(self._document_part(source))
            parts.append(f"User message: {message}")
            messages = [*past, ChatMessage(role="user", parts=parts)]
        else:
            system_prompt = load_prompt("writing_assistant")
            temperature = 0.7
            messages = [*past, ChatMessage(role="user", parts=[message])]

        return self._retry(
            lambda: self._client.create_completion(
                model=self._fast_model,
                temperature=temperature,
                system_prompt=system_prompt,
                messages=messages,
            )
        )

    def _press_release_parts(self, payload: FilePayload) -> tuple[list[MessagePart], str]:
        """Return the message parts for the source file and its display text."""
        if is_word_document(payload.mime_type):
            try:
                text = self._extract_text(payload)
            except TextExtractionError as exc:
                Log.error(f"Word extraction failed for {payload.file_name}, sending binary: {exc}")
                return [payload], WORD_FAILED_PLACEHOLDER
            if text:
                return [f"EXTRACTED WORD TEXT:\n{text}"], text
            Log.warning(f"Word extraction returned no text for {payload.file_name}, sending binary")
            return [payload], WORD_EMPTY_PLACEHOLDER

        source_text = BINARY_PLACEHOLDER
        if is_pdf(payload.mime_type):
            try:
                source_text = self._extract_text(payload) or BINARY_PLACEHOLDER
            except TextExtractionError as exc:
                Log.warning(f"Local PDF extraction failed for {payload.file_name}: {exc}")
        return [payload], source_text

    def _document_part(self, source: FilePayload) -> MessagePart:
        if not is_word_document(source.mime_type):
            return source
        try:
            text = self._extract_text(source)
        except TextExtractionError as exc:
            Log.warning(f"Word extraction failed for {source.file_name}, sending binary: {exc}")
            return source
        return f'CONTENT OF "{source.file_name}":\n{text}'

    def _extract_text(self, payload: FilePayload) -> str:
        extractor = self._text_extractors.for_mime_type(payload.mime_type)
        return extractor.extract(payload.raw_bytes())

    def _retry(self, operation: Callable[[], T]) -> T:
        return retry_operation(
            operation,
            retries=self._max_retries,
            delay_seconds=self._retry_delay_seconds,
        )

    @staticmethod
    def _parse_json(raw: str) -> dict[str, Any]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise InferenceError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise InferenceError("JSON response must be an object")
        return parsed
