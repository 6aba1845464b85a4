"""Builds result models from the model's parsed JSON replies."""

from typing import Any

from newsdesk.inference.exceptions import InferenceValidationError
from newsdesk.inference.models import (
    VERDICTS,
    AnalysisResult,
    FactCheck,
    PressReleaseResult,
    Source,
    Topic,
    TranscriptionSegment,
)

_ANALYSIS_FIELDS = ("transcription", "factChecks", "topics", "suggestedHeadlines", "socialThreads")


def build_analysis_result(data: dict[str, Any]) -> AnalysisResult:
    """Validate a transcription reply and build an AnalysisResult.

    Raises:
        InferenceValidationError: on any shape mismatch.
    """
    for name in _ANALYSIS_FIELDS:
        if not isinstance(data.get(name), list):
            raise InferenceValidationError(f"'{name}' must be a list")

    segments = [
        TranscriptionSegment(
            timestamp=_require_str(item, "timestamp", f"transcription[{i}]"),
            text=_require_str(item, "text", f"transcription[{i}]"),
        )
        for i, item in enumerate(_objects(data["transcription"], "transcription"))
    ]
    topics = [
        Topic(
            name=_require_str(item, "name", f"topics[{i}]"),
            description=_require_str(item, "description", f"topics[{i}]"),
        )
        for i, item in enumerate(_objects(data["topics"], "topics"))
    ]
    fact_checks = [
        build_fact_check(item, where=f"factChecks[{i}]")
        for i, item in enumerate(_objects(data["factChecks"], "factChecks"))
    ]
    return AnalysisResult(
        transcription=segments,
        topics=topics,
        suggested_headlines=_strings(data["suggestedHeadlines"], "suggestedHeadlines"),
        social_threads=_strings(data["socialThreads"], "socialThreads"),
        fact_checks=fact_checks,
    )


def build_stored_analysis_result(data: dict[str, Any]) -> AnalysisResult:
    """Rebuild an AnalysisResult from a stored history payload.

    Lists missing from older entries read as empty. Manual fact checks
    are restored too.

    Raises:
        InferenceValidationError: on any shape mismatch.
    """
    result = build_analysis_result({name: [] for name in _ANALYSIS_FIELDS} | data)
    manual = data.get("manualFactChecks") or []
    if not isinstance(manual, list):
        raise InferenceValidationError("'manualFactChecks' must be a list")
    result.manual_fact_checks = [
        build_fact_check(item, where=f"manualFactChecks[{i}]") for i, item in enumerate(manual)
    ]
    return result


def build_press_release_result(
    data: dict[str, Any],
    *,
    fallback_source_text: str = "",
    user_angle: str | None = None,
) -> PressReleaseResult:
    """Build a PressReleaseResult. Missing text fields default to ''."""
    return PressReleaseResult(
        headline=_optional_str(data, "headline"),
        lead=_optional_str(data, "lead"),
        body=_optional_str(data, "body"),
        source_text=_optional_str(data, "originalText") or fallback_source_text,
        user_angle=user_angle or None,
    )


def build_fact_check(data: Any, *, where: str = "factCheck") -> FactCheck:
    if not isinstance(data, dict):
        raise InferenceValidationError(f"{where} must be an object")
    verdict = _require_str(data, "verdict", where)
    if verdict not in VERDICTS:
        raise InferenceValidationError(
            f"{where}: 'verdict' must be one of {list(VERDICTS)}, got {verdict!r}"
        )
    raw_sources = data.get("sources") or []
    if not isinstance(raw_sources, list):
        raise InferenceValidationError(f"{where}: 'sources' must be a list")
    sources = [
        Source(
            title=_require_str(item, "title", f"{where}.sources[{i}]"),
            url=_require_str(item, "url", f"{where}.sources[{i}]"),
        )
        for i, item in enumerate(_objects(raw_sources, f"{where}.sources"))
    ]
    return FactCheck(
        claim=_require_str(data, "claim", where),
        verdict=verdict,
        explanation=_require_str(data, "explanation", where),
        sources=sources,
    )


def _objects(raw: list[Any], where: str) -> list[dict[str, Any]]:
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise InferenceValidationError(f"{where}[{i}] must be an object")
    return raw


def _strings(raw: list[Any], where: str) -> list[str]:
    for i, item in enumerate(raw):
        if not isinstance(item, str):
            raise InferenceValidationError(f"{where}[{i}] must be a string")
    return list(raw)


def _require_str(data: dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise InferenceValidationError(f"{where}: '{key}' must be a string")
    return value


def _optional_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""
